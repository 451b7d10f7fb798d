"""
Logging utilities for Crime Map.

Parser units log every field transition at DEBUG, which is only readable
when pdfminer (under pdfplumber) and pymongo are kept out of the way.
"""

import logging
from typing import List, Optional

from crimemap.config import Config, LoggingConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Libraries which log per PDF object or per socket event at DEBUG
NOISY_LOGGERS = ("pdfminer", "pymongo")


def _resolve_level(level: str) -> int:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    return numeric_level


def _build_handlers(log_cfg: LoggingConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_cfg.file:
        handlers.append(logging.FileHandler(log_cfg.file, encoding="utf-8"))
    return handlers


def configure_logging(config: Optional[Config] = None, level: Optional[str] = None) -> None:
    """
    Configure root logging for a crime log run.

    Args:
        config: Configuration object, defaults are used when omitted
        level: Level name from the command line, wins over the configured one

    Raises:
        ValueError: If the level is not a logging level name
    """
    log_cfg = config.logging if config is not None else LoggingConfig()
    numeric_level = _resolve_level(level or log_cfg.level)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=_build_handlers(log_cfg),
    )

    if log_cfg.quiet_libraries:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.
    """
    return logging.getLogger(name)
