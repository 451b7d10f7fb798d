"""
Crime Map - Crime Log Extraction System.

A system for extracting structured incident records from university
Clery act crime log PDF reports.
"""

__version__ = "0.1.0"

from crimemap.model import (
    ConsumeResult,
    CorrectionKind,
    CorrectionNote,
    Crime,
    ParseStatus,
    Report,
    University,
)
from crimemap.config import Config, MongoDBConfig, load_config
from crimemap.parser import OnceRunner, Parser, ParserRunner
from crimemap.daterange import DateRangeParser
from crimemap.drexel import DrexelParser, new_drexel_runner
from crimemap.geo import GeoCache
from crimemap.reader import Reader, parse_fields, read_range
from crimemap.writers import write_csv, write_json, write_ndjson, write_outputs

__all__ = [
    "ConsumeResult",
    "CorrectionKind",
    "CorrectionNote",
    "Crime",
    "ParseStatus",
    "Report",
    "University",
    "Config",
    "MongoDBConfig",
    "load_config",
    "OnceRunner",
    "Parser",
    "ParserRunner",
    "DateRangeParser",
    "DrexelParser",
    "new_drexel_runner",
    "GeoCache",
    "Reader",
    "parse_fields",
    "read_range",
    "write_csv",
    "write_json",
    "write_ndjson",
    "write_outputs",
]
