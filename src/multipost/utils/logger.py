"""
Module: logger.py
Description: Structured logging configuration for multipost.

Configures structlog for JSON output on the process error stream.
Provides consistent logging across all modules with proper context
and structured data.

Key Components:
- JSON (default) or console rendering
- Timestamp and log level processors
- configure_logging() for the CLI
- get_logger() helper function

Dependencies: structlog, datetime, logging
Author: Multipost Team
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

import structlog


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(
    level: str = "INFO",
    fmt: str = "json",
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure structlog for the process.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: "json" for one JSON object per line, "console" for humans
        stream: Output stream, standard error when omitted
    """
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        # Diagnostics never go to stdout
        logger_factory=structlog.WriteLoggerFactory(file=stream or sys.stderr),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )


configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("Delivery attempt failed", target="http://a/", attempt=1)
        {"target": "http://a/", "attempt": 1, "event": "Delivery attempt failed", "timestamp": "...", "level": "WARNING"}
    """
    return structlog.get_logger(name)
