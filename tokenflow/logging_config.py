"""
Structured logging configuration for tokenflow.

Provides JSON-formatted logs with a case_id field so replay messages can be
correlated with the trace case being replayed.

Environment Variables:
    TOKENFLOW_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    TOKENFLOW_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from tokenflow.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, case_id="case-42")
    logger.info("Replaying case")
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure root logger with structured logging.

    Arguments override the environment:
    - TOKENFLOW_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - TOKENFLOW_LOG_FORMAT: json, text (default: json)
    """
    log_level = (level or os.getenv("TOKENFLOW_LOG_LEVEL", "INFO")).upper()
    log_format = (fmt or os.getenv("TOKENFLOW_LOG_FORMAT", "json")).lower()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    resolved = level_map.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps CLI --json output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.addFilter(CaseIDFilter())

    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(case_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s [case_id=%(case_id)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str, case_id: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger that stamps every record with a case_id.

    Args:
        name: Logger name (typically __name__)
        case_id: Case being replayed ("all" when unfiltered)
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"case_id": case_id or "N/A"})


class CaseIDFilter(logging.Filter):
    """
    Logging filter that adds case_id to records that lack one.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "case_id"):
            record.case_id = "N/A"  # type: ignore
        return True
