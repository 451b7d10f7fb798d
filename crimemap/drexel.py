"""
Parser for Drexel University Clery crime logs.

A Drexel crime log is decoded into fields in this order, with each page
wrapped in a header and a footer:

    From Jan 13, 2016 to Jan 13, 2017.      page header, 3 fields follow
    Date Reported:                          2 column captions follow
    <reported timestamp>
    <location>
    <report id, "<super>-<sub>">
    <incident classification>
    Incident(s):
    <occurred start> - <occurred end>
    Date and Time Occurred From - Occurred To:   1 caption follows
    <synopsis lines ...>
    Disposition:
    <disposition>
    ...
    2                                       page number, 5 fields follow
    ...
    Incident(s) Listed.
     <total number of incidents>
"""

import re
from datetime import datetime, timedelta
from typing import Optional, Sequence, Tuple

from crimemap.config import Config
from crimemap.daterange import DateRangeParser
from crimemap.dates import parse_header_date, parse_report_date
from crimemap.geo import GeoCache
from crimemap.log import get_logger
from crimemap.model import (
    ConsumeResult,
    CorrectionKind,
    CorrectionNote,
    Crime,
    Report,
    StoreError,
)
from crimemap.parser import Parser, ParserRunner, fatal, no_match, ok, record_complete

logger = get_logger(__name__)


def correct_occurred_range(
    original: str, start: datetime, end: datetime, fix: timedelta = timedelta(hours=12)
) -> Tuple[datetime, Optional[CorrectionNote]]:
    """
    Repair an occurred range whose end was printed on the wrong half of the day.

    Ranges which are already in order are returned untouched.

    Args:
        original: Raw field the range was parsed from
        start: Range start
        end: Range end
        fix: Offset added to an end which comes before the start

    Returns:
        Range end to use, and a correction note if the end was changed

    Raises:
        ValueError: If the range is still inverted after the fix
    """
    if start <= end:
        return end, None

    fixed_end = end + fix
    if start > fixed_end:
        raise ValueError(
            f"error parsing date_occurred, start date is after end date "
            f"after correction, field: {original!r}"
        )

    note = CorrectionNote(
        field="date_occurred",
        original=original,
        corrected=f"{start.isoformat()} - {fixed_end.isoformat()}",
        kind=CorrectionKind.BAD_RANGE_END,
    )
    return fixed_end, note


class DrexelParser(Parser):
    """
    Interprets the fields of a Drexel crime log into Crime records.

    The parser is a state machine which remembers, between calls, how many
    fields it must skip and which multi-field group it is in the middle of.
    Checks run in a fixed order: pending skips, page headers, page footers,
    groups in progress, then labels which start a new group.
    """

    name = "DrexelParser"

    LABEL_REPORTED = "Date Reported:"
    LABEL_INCIDENTS = "Incident(s):"
    LABEL_OCCURRED = "Date and Time Occurred From - Occurred To:"
    LABEL_DISPOSITION = "Disposition:"
    LABEL_CRIME_COUNT = "Incident(s) Listed."

    HEADER_RANGE_REGEX = DateRangeParser.RANGE_REGEX
    FOOTER_PAGE_NUM_REGEX = re.compile(r"^[0-9]+$")
    OCCURRED_RANGE_REGEX = re.compile(r"^(.*[0-9]) - ([0-9].*)$")
    REPORT_ID_PART_REGEX = re.compile(r"^[0-9]+$")
    CRIME_COUNT_REGEX = re.compile(r"^\s*([0-9]+)$")

    REPORTED_CAPTIONS = 2  # Column captions between "Date Reported:" and its values
    OCCURRED_CAPTIONS = 1  # Caption between the occurred label and the synopsis
    GLOB1_FIELDS = 4  # Reported timestamp, location, report ID, incident

    def __init__(
        self,
        geo_cache: Optional[GeoCache] = None,
        strict: bool = True,
        header_skip: int = 3,
        footer_skip: int = 5,
        range_fix_hours: int = 12,
    ):
        self.geo_cache = geo_cache
        self.strict = strict
        self.header_skip = header_skip
        self.footer_skip = footer_skip
        self.range_fix = timedelta(hours=range_fix_hours)
        self.reset()

    @classmethod
    def from_config(cls, cfg: Config, geo_cache: Optional[GeoCache] = None) -> "DrexelParser":
        """
        Create a parser with the parsing section of a configuration.
        """
        return cls(
            geo_cache=geo_cache,
            strict=cfg.parsing.strict,
            header_skip=cfg.parsing.header_skip,
            footer_skip=cfg.parsing.footer_skip,
            range_fix_hours=cfg.parsing.range_fix_hours,
        )

    def reset(self) -> None:
        self._skip = 0
        self._consume = 0  # Glob 1 fields left to consume
        self._consume_occurred = False
        self._consume_desc = False
        self._consume_fix = False
        self._consume_crime_count = False
        self._page_num = 1
        self._crimes_count = 0

    @property
    def crimes_count(self) -> int:
        """Number of crimes completed since the last reset."""
        return self._crimes_count

    @property
    def page_num(self) -> int:
        """Page the parser is currently on."""
        return self._page_num

    def parse(self, i: int, fields: Sequence[str], report: Report, crime: Crime) -> ConsumeResult:
        field = fields[i]

        if self._skip > 0:
            self._skip -= 1
            return ok()

        header_match = self.HEADER_RANGE_REGEX.match(field)
        if header_match:
            return self._parse_header(header_match, report)

        if self.FOOTER_PAGE_NUM_REGEX.match(field):
            logger.debug(f"End of page {self._page_num}")
            report["pages"] = self._page_num
            self._page_num += 1
            self._skip = self.footer_skip
            return ok()

        if self._consume > 0:
            return self._parse_glob1(field, crime)

        if self._consume_occurred:
            return self._parse_occurred(field, crime)

        if self._consume_desc:
            if field == self.LABEL_DISPOSITION:
                self._consume_desc = False
                self._consume_fix = True
            else:
                crime["descriptions"].append(field)
            return ok()

        if self._consume_fix:
            return self._parse_disposition(field, crime)

        if field == self.LABEL_REPORTED:
            self._skip = self.REPORTED_CAPTIONS
            self._consume = self.GLOB1_FIELDS
            return ok()

        if field == self.LABEL_INCIDENTS:
            self._consume_occurred = True
            return ok()

        if field == self.LABEL_OCCURRED:
            self._skip = self.OCCURRED_CAPTIONS
            self._consume_desc = True
            crime["descriptions"] = []
            return ok()

        if field == self.LABEL_CRIME_COUNT:
            self._consume_crime_count = True
            return ok()

        if self._consume_crime_count:
            return self._parse_crime_count(field)

        if not self.strict:
            logger.warning(f"Skipping unknown field at index {i}: {field!r}")
            return ok()

        # Left for the runner to report as a field no parser handles
        return no_match()

    def _parse_header(self, match: re.Match, report: Report) -> ConsumeResult:
        # Every page repeats the header, only the first one is saved
        if report.get("range_start_date") is None:
            try:
                start = parse_header_date(*match.group(1, 2, 3))
                end = parse_header_date(*match.group(4, 5, 6))
            except ValueError as e:
                return fatal(f"error parsing header date range: {e}")

            report["range_start_date"] = start
            report["range_end_date"] = end
            logger.debug(f"Report covers {start.date()} to {end.date()}")

        self._skip = self.header_skip
        return ok()

    def _parse_glob1(self, field: str, crime: Crime) -> ConsumeResult:
        if self._consume == 4:
            try:
                crime["date_reported"] = parse_report_date(field)
            except ValueError as e:
                return fatal(f"error parsing reported at field: {e}")
            crime["page"] = self._page_num
        elif self._consume == 3:
            crime["location"] = field
            if self.geo_cache is not None:
                try:
                    crime["geo_loc_id"] = self.geo_cache.get(field)
                except StoreError as e:
                    return fatal(f"error getting cached location: {e}")
        elif self._consume == 2:
            parts = field.split("-")
            if len(parts) != 2:
                return fatal(
                    f"report ID field has incorrect number of parts, field: {field!r}, "
                    f"parts: {len(parts)}, expected parts: 2"
                )
            if not all(self.REPORT_ID_PART_REGEX.fullmatch(part) for part in parts):
                return fatal(f"error parsing report ID into unsigned integers, field: {field!r}")
            crime["report_super_id"] = int(parts[0])
            crime["report_sub_id"] = int(parts[1])
        else:
            crime["incidents"] = [field]

        self._consume -= 1
        return ok()

    def _parse_occurred(self, field: str, crime: Crime) -> ConsumeResult:
        self._consume_occurred = False

        match = self.OCCURRED_RANGE_REGEX.match(field)
        if not match:
            return fatal(f"error parsing date occurred, expected 2 dates, field: {field!r}")

        try:
            start = parse_report_date(match.group(1))
        except ValueError as e:
            return fatal(f"error parsing occurred start date, field: {field!r}, err: {e}")

        try:
            end = parse_report_date(match.group(2))
        except ValueError as e:
            return fatal(f"error parsing occurred end date, field: {field!r}, err: {e}")

        try:
            end, note = correct_occurred_range(field, start, end, self.range_fix)
        except ValueError as e:
            return fatal(str(e))

        if note is not None:
            logger.warning(f"Corrected {note.field} {note.original!r} to {note.corrected!r}")
            crime["parse_errors"].append(note)

        crime["date_occurred_start"] = start
        crime["date_occurred_end"] = end
        return ok()

    def _parse_disposition(self, field: str, crime: Crime) -> ConsumeResult:
        crime["remediation"] = field
        self._consume_fix = False
        self._crimes_count += 1

        if crime.get("date_occurred_start") is None:
            logger.warning(f"Crime {crime.get('report_super_id')}-{crime.get('report_sub_id')} "
                           f"has no occurred range")

        return record_complete()

    def _parse_crime_count(self, field: str) -> ConsumeResult:
        self._consume_crime_count = False

        match = self.CRIME_COUNT_REGEX.fullmatch(field)
        if not match:
            return fatal(f"error parsing number of listed crimes: {field!r}")

        count = int(match.group(1))
        if count != self._crimes_count:
            return fatal(
                f"number of listed crimes and number of crimes parsed does not match: "
                f"listed: {count}, parsed: {self._crimes_count}"
            )

        return ok()


def new_drexel_runner(cfg: Optional[Config] = None, geo_cache: Optional[GeoCache] = None) -> ParserRunner:
    """
    Create a ParserRunner with the parsers needed to extract every crime
    from a Drexel crime log.

    Args:
        cfg: Configuration, defaults are used when omitted
        geo_cache: Cache used to resolve crime locations

    Returns:
        Runner ready to parse a report's fields
    """
    runner = ParserRunner()
    runner.add(DrexelParser.from_config(cfg or Config(), geo_cache=geo_cache))
    return runner
