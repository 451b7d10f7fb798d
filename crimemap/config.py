"""
Configuration module for Crime Map.
"""

import json
import os
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from crimemap.model import ConfigError


class InputConfig(BaseModel):
    """
    Configuration for input.
    """

    paths: List[str] = ["./reports/*.pdf"]  # Input file paths/globs


class ParsingConfig(BaseModel):
    """
    Configuration for parsing.
    """

    strict: bool = True  # Fail on tokens no state expects, instead of skipping them
    range_fix_hours: int = 12  # Hours added to an inverted occurred range end
    header_skip: int = 3  # Tokens following a page header date range
    footer_skip: int = 5  # Tokens following a page number


class OutputConfig(BaseModel):
    """
    Configuration for output.
    """

    json_path: Optional[str] = "./out/crimes.json"  # JSON output path
    csv_path: Optional[str] = "./out/crimes.csv"  # CSV output path
    ndjson_path: Optional[str] = None  # NDJSON output path (disabled by default)
    pretty_json: bool = True  # Whether to pretty-print JSON


class LoggingConfig(BaseModel):
    """
    Configuration for logging.
    """

    level: str = "INFO"  # Logging level (DEBUG/INFO/WARN/ERROR)
    file: Optional[str] = None  # Also write log records to this file
    quiet_libraries: bool = True  # Hold pdfminer/pymongo chatter at WARNING


class MongoDBConfig(BaseModel):
    """
    Configuration for MongoDB persistence.
    """

    enabled: bool = False  # Whether MongoDB persistence is enabled
    uri: str = "mongodb://localhost:27017"  # MongoDB connection URI
    database: str = "crime_map"  # Database name


class Config(BaseModel):
    """
    Main configuration.
    """

    input: InputConfig = Field(default_factory=InputConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    mongodb: Optional[MongoDBConfig] = None  # MongoDB config (optional)


def load_config(path: Optional[str] = None) -> Config:
    """
    Load configuration from a file.

    Args:
        path: Path to the configuration file

    Returns:
        Configuration object
    """
    if path:
        with open(path, "r") as f:
            if path.endswith(".yaml") or path.endswith(".yml"):
                config_dict = yaml.safe_load(f)
            elif path.endswith(".json"):
                config_dict = json.load(f)
            else:
                raise ValueError(f"Unsupported configuration file format: {path}")

        try:
            return Config(**(config_dict or {}))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e
    else:
        # Try to load from default locations
        default_locations = [
            "./config.yaml",
            "./config.yml",
            "./config.json",
            os.path.expanduser("~/.config/crimemap/config.yaml"),
        ]

        for loc in default_locations:
            if os.path.exists(loc):
                return load_config(loc)

        return Config()
