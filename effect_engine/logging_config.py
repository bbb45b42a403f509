"""
Structured logging configuration for the effect engine.

Provides JSON-formatted logs with trace_id support for correlating the
activity of one engine instance or one effect key.

Environment Variables:
    EFFECT_ENGINE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    EFFECT_ENGINE_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from effect_engine.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, trace_id="alpha")
    logger.info("Starting effect")
"""

import logging
import os
import sys
from typing import Optional, TextIO

from pythonjsonlogger import jsonlogger

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class TraceIDFilter(logging.Filter):
    """
    Logging filter that adds trace_id to all log records.

    Ensures all logs have a trace_id field, even if not set via LoggerAdapter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            record.trace_id = "N/A"  # type: ignore
        return True


def build_formatter(log_format: str) -> logging.Formatter:
    """Return the JSON or text formatter for log_format."""
    if log_format == "json":
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s [trace_id=%(trace_id)s]",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure root logger with structured logging.

    Args:
        level: DEBUG, INFO, WARNING, ERROR (default: EFFECT_ENGINE_LOG_LEVEL or INFO)
        log_format: json or text (default: EFFECT_ENGINE_LOG_FORMAT or json)
        stream: Output stream (default: stdout)
    """
    log_level = (level or os.getenv("EFFECT_ENGINE_LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.getenv("EFFECT_ENGINE_LOG_FORMAT", "json")).lower()
    resolved = LEVELS.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(resolved)
    # handler-level filter also covers records propagated from child loggers
    handler.addFilter(TraceIDFilter())
    handler.setFormatter(build_formatter(log_format))
    root_logger.addHandler(handler)


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger with optional trace_id for correlation.

    Args:
        name: Logger name (typically __name__)
        trace_id: Trace ID for correlating logs (engine name or effect key)

    Returns:
        LoggerAdapter with trace_id in extra fields
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"trace_id": trace_id or "N/A"})


def add_trace_id_filter() -> None:
    """Add TraceIDFilter to every root handler."""
    for handler in logging.getLogger().handlers:
        handler.addFilter(TraceIDFilter())
