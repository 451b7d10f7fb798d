"""
Command-line interface for Crime Map.
"""

import argparse
import glob
import logging
import sys
from pathlib import Path
from typing import List, Optional

from crimemap.config import MongoDBConfig, load_config
from crimemap.db.mongo import MongoStore
from crimemap.log import configure_logging
from crimemap.model import CrimeMapError
from crimemap.reader import Reader
from crimemap.writers import write_outputs

logger = logging.getLogger(__name__)


def find_inputs(patterns: List[str]) -> List[str]:
    """
    Expand input paths and globs into existing files.

    Args:
        patterns: File paths or glob patterns

    Returns:
        Sorted file paths
    """
    input_files = set()
    for pattern in patterns:
        for match in glob.glob(pattern):
            if Path(match).is_file():
                input_files.add(match)
    return sorted(input_files)


def process_command(args: argparse.Namespace) -> int:
    """
    Process command-line arguments.

    Args:
        args: Command-line arguments

    Returns:
        Exit code
    """
    config = load_config(args.config)
    configure_logging(config, args.log_level)

    if args.json:
        config.output.json_path = args.json
    if args.csv:
        config.output.csv_path = args.csv
    if args.ndjson:
        config.output.ndjson_path = args.ndjson
    if args.lenient:
        config.parsing.strict = False
    if args.mongo:
        config.mongodb = config.mongodb or MongoDBConfig()
        config.mongodb.enabled = True

    input_files = find_inputs(args.input or config.input.paths)
    if not input_files:
        logger.error("No input files found")
        return 1

    store = None
    if config.mongodb is not None and config.mongodb.enabled:
        store = MongoStore(config.mongodb)

    all_crimes = []
    try:
        for file in input_files:
            logger.info(f"Processing {file}")
            try:
                _, crimes = Reader(file, config, store=store).parse()
            except CrimeMapError as e:
                logger.error(f"Failed to parse {file}: {e}")
                return 1
            all_crimes.extend(crimes)
    finally:
        if store is not None:
            store.close()

    write_outputs(all_crimes, config)

    logger.info(f"Processed {len(input_files)} files, extracted {len(all_crimes)} crimes")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.
    """
    parser = argparse.ArgumentParser(description="Extract crimes from university crime logs")
    parser.add_argument("--config", default=None, help="Path to configuration file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level")
    parser.add_argument("--in", dest="input", nargs="+", help="Input files")
    parser.add_argument("--json", help="JSON output file")
    parser.add_argument("--csv", help="CSV output file")
    parser.add_argument("--ndjson", help="NDJSON output file")
    parser.add_argument("--lenient", action="store_true", help="Skip unknown fields instead of failing")
    parser.add_argument("--mongo", action="store_true", help="Save results to MongoDB")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    args = build_parser().parse_args(argv)

    try:
        return process_command(args)
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
