"""
Crime log reader for Crime Map.

Takes a crime log PDF, extracts its crimes with the parsers for the
university which published it, and optionally saves the results.
"""

import datetime
from typing import List, Optional, Sequence, Tuple

from crimemap.config import Config
from crimemap.daterange import DateRangeParser
from crimemap.db.mongo import MongoStore
from crimemap.drexel import new_drexel_runner
from crimemap.geo import GeoCache
from crimemap.log import get_logger
from crimemap.model import (
    Crime,
    ParseError,
    Report,
    University,
    create_new_crime,
    create_new_report,
)
from crimemap.parser import OnceRunner
from crimemap.pdfio import extract_fields_from_pdf

logger = get_logger(__name__)


def determine_university(fields: Sequence[str]) -> University:
    """
    Find which university published a report, by searching its fields for
    the first occurrence of a university name.

    Args:
        fields: Report fields

    Returns:
        Publishing university
    """
    for field in fields:
        for univ in University:
            if univ.value in field:
                return univ

    raise ParseError("error determining university, no field with university name found")


def read_range(fields: Sequence[str]) -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Find the date range a report covers without extracting its crimes.

    Args:
        fields: Report fields

    Returns:
        Start and end of the covered range
    """
    report = create_new_report()
    OnceRunner(DateRangeParser()).parse(report, create_new_crime(), fields)
    return report["range_start_date"], report["range_end_date"]


def save_results(store: MongoStore, report: Report, crimes: List[Crime]) -> str:
    """
    Save a report and its crimes, linking each crime to the report.

    Args:
        store: Persistence backend
        report: Parsed report metadata
        crimes: Crimes parsed from the report

    Returns:
        ID of the saved report
    """
    report_id = store.insert_report_if_new(report)
    for crime in crimes:
        crime["report_id"] = report_id
        store.insert_crime_if_new(crime)

    logger.info(f"Saved report {report_id} with {len(crimes)} crimes")
    return report_id


def parse_fields(
    fields: Sequence[str],
    cfg: Optional[Config] = None,
    source_file: str = "",
    pages: Optional[int] = None,
    geo_cache: Optional[GeoCache] = None,
    store: Optional[MongoStore] = None,
) -> Tuple[Report, List[Crime]]:
    """
    Extract the crimes of a report from its already decoded fields.

    Args:
        fields: Report fields in reading order
        cfg: Configuration, defaults are used when omitted
        source_file: Name of the document the fields came from
        pages: Page count of the document, counted from page footers if omitted
        geo_cache: Cache used to resolve crime locations
        store: Persistence backend, results are not saved if omitted

    Returns:
        Report metadata and the parsed crimes
    """
    cfg = cfg or Config()
    if geo_cache is None and store is not None:
        geo_cache = GeoCache(store.insert_geoloc_if_new)

    report = create_new_report(source_file)
    report["university"] = determine_university(fields).value

    runner = new_drexel_runner(cfg, geo_cache=geo_cache)
    crimes = runner.parse(report, fields)

    if pages is not None:
        report["pages"] = pages
    report["crimes_count"] = len(crimes)
    report["parsed_on"] = datetime.datetime.now(datetime.timezone.utc)
    report["parse_success"] = True

    if store is not None:
        save_results(store, report, crimes)

    return report, crimes


class Reader:
    """
    Reads a crime log PDF into a Report and its Crimes.
    """

    def __init__(
        self,
        path: str,
        cfg: Optional[Config] = None,
        geo_cache: Optional[GeoCache] = None,
        store: Optional[MongoStore] = None,
    ):
        self.path = path
        self.cfg = cfg or Config()
        self.geo_cache = geo_cache
        self.store = store
        self.report: Optional[Report] = None
        self.crimes: List[Crime] = []

    @property
    def parsed(self) -> bool:
        """Whether the PDF has been parsed yet."""
        return self.report is not None

    def parse(self) -> Tuple[Report, List[Crime]]:
        """
        Parse the PDF. A Reader can only parse once.

        Returns:
            Report metadata and the parsed crimes
        """
        if self.parsed:
            raise ParseError("report has already been parsed")

        fields, pages = extract_fields_from_pdf(self.path)

        self.report, self.crimes = parse_fields(
            fields,
            self.cfg,
            source_file=self.path,
            pages=pages,
            geo_cache=self.geo_cache,
            store=self.store,
        )

        logger.info(f"Read {len(self.crimes)} crimes from {self.path}")
        return self.report, self.crimes
