"""
Date parsing helpers for crime log documents.

Crime logs print two date formats: page headers use month abbreviations
("Jan 13, 2016") and incident fields use a compact timestamp
("10/14/17 - FRI at 09:00"). All parsed values are UTC.
"""

import re
from datetime import datetime, timezone
from typing import Tuple

MONTH_ABBRVS: Tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# MM/DD/YY - <weekday> at HH:MM
REPORT_DATE_REGEX = re.compile(
    r"^(?P<month>[0-9]{2})/(?P<day>[0-9]{2})/(?P<year>[0-9]{2}) - [A-Z]+ at "
    r"(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2})$"
)


def parse_month_abbrv(abbrv: str) -> int:
    """
    Convert a three letter month abbreviation into a month number.

    Args:
        abbrv: Abbreviation with a capital first letter, e.g. "Jan"

    Returns:
        Month number, 1 through 12
    """
    try:
        return MONTH_ABBRVS.index(abbrv) + 1
    except ValueError:
        raise ValueError(f"error parsing month abbreviation, unknown value: {abbrv}") from None


def parse_header_date(month: str, day: str, year: str) -> datetime:
    """
    Build a date from the parts of a header date such as "Jan 13, 2016".

    Args:
        month: Month abbreviation
        day: 1 or 2 digit day
        year: Full 4 digit year

    Returns:
        Midnight UTC on the given day
    """
    try:
        month_num = parse_month_abbrv(month)
    except ValueError as e:
        raise ValueError(f"error parsing month abbreviation into month number: {e}") from e

    return datetime(int(year), month_num, int(day), tzinfo=timezone.utc)


def parse_report_date(field: str) -> datetime:
    """
    Parse an incident timestamp such as "10/14/17 - FRI at 09:00".

    Two digit years are taken to be in the 2000s.

    Args:
        field: Token text

    Returns:
        Parsed timestamp
    """
    match = REPORT_DATE_REGEX.match(field.strip())
    if not match:
        raise ValueError(f"not a report date: {field!r}")

    return datetime(
        2000 + int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        tzinfo=timezone.utc,
    )
