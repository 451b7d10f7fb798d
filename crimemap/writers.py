"""
Output writers for Crime Map.
"""

import csv
import json
import os
from datetime import datetime
from typing import Dict, List

from crimemap.config import Config
from crimemap.log import get_logger
from crimemap.model import Crime, OutputError

logger = get_logger(__name__)

CSV_FIELDS = [
    "report_id", "report_super_id", "report_sub_id", "date_reported",
    "date_occurred_start", "date_occurred_end", "location", "geo_loc_id",
    "incidents", "descriptions", "remediation", "page", "corrections",
]


def crime_to_dict(crime: Crime) -> Dict:
    """
    Convert a crime to JSON serializable values.

    Args:
        crime: Crime to convert

    Returns:
        Dictionary with ISO 8601 dates and correction notes as objects
    """
    out = {}
    for key, value in crime.items():
        if isinstance(value, datetime):
            out[key] = value.isoformat()
        elif key == "parse_errors":
            out[key] = [
                {"field": n.field, "original": n.original, "corrected": n.corrected, "kind": n.kind.value}
                for n in value
            ]
        else:
            out[key] = value
    return out


def write_outputs(crimes: List[Crime], cfg: Config) -> None:
    """
    Write crimes to all configured output formats.

    Args:
        crimes: List of crimes to write
        cfg: Application configuration
    """
    logger.info(f"Writing {len(crimes)} crimes to outputs")

    for error in validate_crimes(crimes):
        logger.warning(f"Validation error: {error}")

    if cfg.output.json_path:
        write_json(crimes, cfg.output.json_path, cfg.output.pretty_json)

    if cfg.output.csv_path:
        write_csv(crimes, cfg.output.csv_path)

    if cfg.output.ndjson_path:
        write_ndjson(crimes, cfg.output.ndjson_path)


def write_json(crimes: List[Crime], path: str, pretty: bool = True) -> None:
    """
    Write crimes to a JSON file.

    Args:
        crimes: List of crimes to write
        path: Output file path
        pretty: Whether to pretty-print the JSON
    """
    logger.info(f"Writing JSON to {path}")

    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump([crime_to_dict(c) for c in crimes], f, indent=2 if pretty else None, ensure_ascii=False)

        logger.info(f"Wrote {len(crimes)} crimes to {path}")
    except Exception as e:
        logger.error(f"Error writing JSON to {path}: {e}")
        raise OutputError(f"Error writing JSON to {path}: {e}") from e


def write_csv(crimes: List[Crime], path: str) -> None:
    """
    Write crimes to a CSV file, one row per crime.

    Args:
        crimes: List of crimes to write
        path: Output file path
    """
    logger.info(f"Writing CSV to {path}")

    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()

            for crime in crimes:
                row = crime_to_dict(crime)
                writer.writerow({
                    "report_id": row.get("report_id") or "",
                    "report_super_id": row.get("report_super_id", ""),
                    "report_sub_id": row.get("report_sub_id", ""),
                    "date_reported": row.get("date_reported") or "",
                    "date_occurred_start": row.get("date_occurred_start") or "",
                    "date_occurred_end": row.get("date_occurred_end") or "",
                    "location": row.get("location", ""),
                    "geo_loc_id": row.get("geo_loc_id") or "",
                    "incidents": " | ".join(row.get("incidents", [])),
                    "descriptions": " | ".join(row.get("descriptions", [])),
                    "remediation": row.get("remediation", ""),
                    "page": row.get("page", ""),
                    "corrections": len(row.get("parse_errors", [])),
                })

        logger.info(f"Wrote {len(crimes)} rows to {path}")
    except Exception as e:
        logger.error(f"Error writing CSV to {path}: {e}")
        raise OutputError(f"Error writing CSV to {path}: {e}") from e


def write_ndjson(crimes: List[Crime], path: str) -> None:
    """
    Write crimes to an NDJSON file, one line per crime.

    Args:
        crimes: List of crimes to write
        path: Output file path
    """
    logger.info(f"Writing NDJSON to {path}")

    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            for crime in crimes:
                f.write(json.dumps(crime_to_dict(crime), ensure_ascii=False) + "\n")

        logger.info(f"Wrote {len(crimes)} lines to {path}")
    except Exception as e:
        logger.error(f"Error writing NDJSON to {path}: {e}")
        raise OutputError(f"Error writing NDJSON to {path}: {e}") from e


def validate_crimes(crimes: List[Crime]) -> List[str]:
    """
    Check crimes for missing values before writing outputs.

    Args:
        crimes: List of crimes to validate

    Returns:
        List of validation errors
    """
    errors = []

    for i, crime in enumerate(crimes):
        if crime.get("date_reported") is None:
            errors.append(f"Crime {i}: Missing reported date")
        if crime.get("report_super_id") is None or crime.get("report_sub_id") is None:
            errors.append(f"Crime {i}: Missing report ID")
        if crime.get("date_occurred_start") is None:
            errors.append(f"Crime {i}: Missing occurred range")
        if not crime.get("incidents"):
            errors.append(f"Crime {i}: Missing incident classification")

    return errors
