"""
MongoDB persistence for Crime Map.

Every insert is an upsert keyed by a deterministic id, so saving the same
report twice returns the existing ids instead of adding duplicates.
"""

import datetime
import hashlib
from typing import Dict, Optional

import pymongo
from pymongo.errors import PyMongoError

from crimemap.config import MongoDBConfig
from crimemap.geo import location_key
from crimemap.log import get_logger
from crimemap.model import CorrectionNote, Crime, Report, StoreError

logger = get_logger(__name__)

REPORTS = "reports"
CRIMES = "crimes"
GEO_LOCS = "geo_locs"
PARSE_ERRORS = "parse_errors"


def keyify(kind: str, *parts) -> str:
    """
    Generate a deterministic ID from the identifying values of a document.

    Args:
        kind: Document kind, used as the ID prefix
        parts: Identifying values

    Returns:
        Deterministic ID
    """
    raw = "::".join("" if p is None else str(p) for p in parts)
    return f"{kind}::" + hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def _iso(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_report_doc(report: Report) -> Dict:
    """
    Convert a report to a MongoDB document.
    """
    return {
        "_id": keyify(
            "report",
            report.get("university"),
            _iso(report.get("range_start_date")),
            _iso(report.get("range_end_date")),
            report.get("pages"),
        ),
        "university": report.get("university"),
        "parsed_on": report.get("parsed_on"),
        "parse_success": report.get("parse_success", False),
        "range_start_date": report.get("range_start_date"),
        "range_end_date": report.get("range_end_date"),
        "pages": report.get("pages", 0),
        "crimes_count": report.get("crimes_count", 0),
        "source_file": report.get("source_file", ""),
    }


def to_crime_doc(crime: Crime) -> Dict:
    """
    Convert a crime to a MongoDB document. Correction notes are stored
    separately, see to_parse_error_doc.
    """
    return {
        "_id": keyify(
            "crime",
            crime.get("report_id"),
            crime.get("report_super_id"),
            crime.get("report_sub_id"),
            _iso(crime.get("date_reported")),
            _iso(crime.get("date_occurred_start")),
            _iso(crime.get("date_occurred_end")),
            crime.get("location"),
            "|".join(crime.get("incidents", [])),
        ),
        "report_id": crime.get("report_id"),
        "date_reported": crime.get("date_reported"),
        "date_occurred_start": crime.get("date_occurred_start"),
        "date_occurred_end": crime.get("date_occurred_end"),
        "report_super_id": crime.get("report_super_id"),
        "report_sub_id": crime.get("report_sub_id"),
        "location": crime.get("location", ""),
        "geo_loc_id": crime.get("geo_loc_id"),
        "incidents": crime.get("incidents", []),
        "descriptions": crime.get("descriptions", []),
        "remediation": crime.get("remediation", ""),
        "page": crime.get("page", 0),
    }


def to_parse_error_doc(crime_id: str, note: CorrectionNote) -> Dict:
    """
    Convert a correction note of a saved crime to a MongoDB document.
    """
    return {
        "_id": keyify("parse_error", crime_id, note.field, note.original, note.corrected, note.kind.value),
        "crime_id": crime_id,
        "field": note.field,
        "original": note.original,
        "corrected": note.corrected,
        "err_type": note.kind.value,
    }


class MongoStore:
    """
    Saves reports, crimes, locations and correction notes in MongoDB.
    """

    def __init__(self, cfg: MongoDBConfig, client: Optional[pymongo.MongoClient] = None):
        self.cfg = cfg
        self.client = client if client is not None else pymongo.MongoClient(cfg.uri, retryWrites=True)
        self.db = self.client[cfg.database]

    def _insert_if_new(self, collection: str, doc: Dict) -> str:
        _id = doc["_id"]
        fields = {k: v for k, v in doc.items() if k != "_id"}

        try:
            self.db[collection].update_one(
                {"_id": _id},
                {"$setOnInsert": dict(fields, ingested_at=datetime.datetime.now(datetime.timezone.utc))},
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"Error writing to MongoDB collection {collection}: {e}")
            raise StoreError(f"Error writing to MongoDB collection {collection}: {e}") from e

        return _id

    def insert_report_if_new(self, report: Report) -> str:
        """
        Save a report unless it exists.

        Returns:
            ID of the new or existing report
        """
        return self._insert_if_new(REPORTS, to_report_doc(report))

    def insert_crime_if_new(self, crime: Crime) -> str:
        """
        Save a crime and its correction notes unless they exist.

        Returns:
            ID of the new or existing crime
        """
        crime_id = self._insert_if_new(CRIMES, to_crime_doc(crime))
        for note in crime.get("parse_errors", []):
            self.insert_parse_error_if_new(crime_id, note)
        return crime_id

    def insert_geoloc_if_new(self, raw: str) -> str:
        """
        Save a raw location unless it exists. Coordinates are filled in later
        by geocoding.

        Returns:
            ID of the new or existing location
        """
        return self._insert_if_new(GEO_LOCS, {"_id": location_key(raw), "raw": raw, "located": False})

    def insert_parse_error_if_new(self, crime_id: str, note: CorrectionNote) -> str:
        """
        Save a correction note unless it exists.

        Returns:
            ID of the new or existing note
        """
        return self._insert_if_new(PARSE_ERRORS, to_parse_error_doc(crime_id, note))

    def close(self) -> None:
        self.client.close()
