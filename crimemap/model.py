"""
Data models for Crime Map.
"""

from datetime import datetime
from enum import Enum
from typing import List, NamedTuple, Optional, TypedDict


class CorrectionKind(Enum):
    """
    Kinds of automatic data repairs applied while parsing.
    """

    BAD_RANGE_END = "BAD_RANGE_END"  # A date range's end came before its start


class CorrectionNote(NamedTuple):
    """
    Audit record of a field value that was altered by a parsing heuristic.
    """

    field: str  # Name of the crime field which was corrected
    original: str  # Raw token text before correction
    corrected: str  # Human readable value after correction
    kind: CorrectionKind


class Crime(TypedDict, total=False):
    """
    Represents one incident from a crime log.
    """

    date_reported: Optional[datetime]  # When the incident was disclosed to police
    date_occurred_start: Optional[datetime]
    date_occurred_end: Optional[datetime]
    report_super_id: Optional[int]  # First half of "<super>-<sub>" report ID
    report_sub_id: Optional[int]  # Second half of "<super>-<sub>" report ID
    location: str  # Raw location text as printed
    geo_loc_id: Optional[str]  # Foreign key from the location resolver
    incidents: List[str]  # Official classifications
    descriptions: List[str]  # Synopsis lines
    remediation: str  # Disposition text
    parse_errors: List[CorrectionNote]
    page: int  # Page the incident starts on
    report_id: Optional[str]  # Foreign key of the owning Report


class Report(TypedDict, total=False):
    """
    Represents document wide information about a crime log.
    """

    university: Optional[str]
    parsed_on: Optional[datetime]
    parse_success: bool
    range_start_date: Optional[datetime]
    range_end_date: Optional[datetime]
    pages: int
    crimes_count: int
    source_file: str


class University(Enum):
    """
    Universities whose crime logs can be parsed.
    """

    DREXEL = "Drexel University"


class ParseStatus(Enum):
    """
    Outcome of asking a parser to interpret tokens at a position.
    """

    NO_MATCH = "no_match"
    OK = "ok"
    RECORD_COMPLETE = "record_complete"
    FATAL = "fatal"


class ConsumeResult(NamedTuple):
    """
    Result of a single Parser.parse call.
    """

    consumed: int  # Number of tokens claimed starting at the cursor
    status: ParseStatus
    reason: Optional[str] = None  # Only set for ParseStatus.FATAL


def create_new_crime() -> Crime:
    """
    Create an empty crime record.

    Returns:
        New crime record
    """
    return {
        "date_reported": None,
        "date_occurred_start": None,
        "date_occurred_end": None,
        "report_super_id": None,
        "report_sub_id": None,
        "location": "",
        "geo_loc_id": None,
        "incidents": [],
        "descriptions": [],
        "remediation": "",
        "parse_errors": [],
        "page": 0,
        "report_id": None,
    }


def is_empty_crime(crime: Crime) -> bool:
    """
    Check whether a crime record has not accumulated any field values.
    """
    return crime == create_new_crime()


def create_new_report(source_file: str = "") -> Report:
    """
    Create an empty report record.

    Args:
        source_file: Path of the document the report describes

    Returns:
        New report record
    """
    return {
        "university": None,
        "parsed_on": None,
        "parse_success": False,
        "range_start_date": None,
        "range_end_date": None,
        "pages": 0,
        "crimes_count": 0,
        "source_file": source_file,
    }


class CrimeMapError(Exception):
    """Base class for all crimemap exceptions."""

    pass


class ParseError(CrimeMapError):
    """Exception raised for parsing errors."""

    pass


class FieldNotParsedError(ParseError):
    """Raised when no parser could interpret a token."""

    def __init__(self, index: int, field: str):
        self.index = index
        self.field = field
        super().__init__(f"no parser processed field with index {index}, field: {field!r}")


class UnitFailedError(ParseError):
    """Raised when a parser reports malformed data it cannot repair."""

    def __init__(self, unit: str, index: int, reason: str):
        self.unit = unit
        self.index = index
        self.reason = reason
        super().__init__(
            f"error running {unit} parser against field with index {index}, err: {reason}"
        )


class NotParsedError(ParseError):
    """Raised when a single-shot pass finds nothing its parser accepts."""

    pass


class ConfigError(CrimeMapError):
    """Exception raised for configuration errors."""

    pass


class OutputError(CrimeMapError):
    """Exception raised for output errors."""

    pass


class StoreError(CrimeMapError):
    """Exception raised for persistence errors."""

    pass
