"""
Parser for the date range printed in crime log page headers.
"""

import re
from typing import Sequence

from crimemap.dates import parse_header_date
from crimemap.log import get_logger
from crimemap.model import ConsumeResult, Crime, Report
from crimemap.parser import Parser, fatal, no_match, ok

logger = get_logger(__name__)


class DateRangeParser(Parser):
    """
    Parses date range fields in the form:

        From <month abbrev> <day>, <year> to <month abbrev> <day>, <year>.

    The range is saved in the report unless a range was already saved. The
    header field and the fields which follow it are consumed together.
    """

    name = "DateRangeParser"

    RANGE_REGEX = re.compile(
        r"^From ([A-Z][a-z]+) ([0-9]{1,2}), ([0-9]{4}) to ([A-Z][a-z]+) ([0-9]{1,2}), ([0-9]{4})\.$"
    )

    # Header field plus the two fields printed after it
    HEADER_FIELDS = 3

    def parse(self, i: int, fields: Sequence[str], report: Report, crime: Crime) -> ConsumeResult:
        match = self.RANGE_REGEX.match(fields[i])
        if not match:
            return no_match()

        if report.get("range_start_date") is None:
            try:
                start = parse_header_date(*match.group(1, 2, 3))
            except ValueError as e:
                return fatal(f"error converting start header date: {e}")

            try:
                end = parse_header_date(*match.group(4, 5, 6))
            except ValueError as e:
                return fatal(f"error converting end header date: {e}")

            report["range_start_date"] = start
            report["range_end_date"] = end
            logger.debug(f"Report covers {start.date()} to {end.date()}")

        return ok(min(self.HEADER_FIELDS, len(fields) - i))
