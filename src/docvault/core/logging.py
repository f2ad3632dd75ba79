"""
Logging utilities for docvault.

Provides a human-readable formatter for interactive use and a JSON formatter
for machine consumption. Modules log through ``logging.getLogger(__name__)``;
this module only configures the ``docvault`` package logger.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

PACKAGE_LOGGER = "docvault"

# Extra fields that are copied into structured log lines when present
CONTEXT_FIELDS = ("version", "project", "operation")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON-structured log lines.

    Each log line includes:
    - Standard log fields (timestamp, level, message, logger)
    - Context fields if present (version, project, operation)
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_timestamp:
            log_entry["timestamp"] = datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat()

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable log lines.

    Format: TIMESTAMP [LEVEL] LOGGER - MESSAGE [version=X]
    """

    def __init__(self, include_timestamp: bool = True):
        if include_timestamp:
            fmt = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
        else:
            fmt = "[%(levelname)s] %(name)s - %(message)s"
        super().__init__(fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)

        context_parts = []
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                context_parts.append(f"{field}={value}")

        if context_parts:
            return f"{base} [{' '.join(context_parts)}]"
        return base


def configure_logging(
    level: int = logging.INFO,
    structured: bool = False,
    include_timestamp: bool = True,
    stream=None,
) -> logging.Logger:
    """
    Configure the docvault package logger.

    Replaces any handler previously installed by this function so repeated
    calls (e.g. from tests) do not duplicate output.

    Args:
        level: Logging level (default: INFO)
        structured: If True, output JSON lines; otherwise human-readable
        include_timestamp: Whether to include a timestamp in each line
        stream: Output stream (default: stderr)

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        if getattr(handler, "_docvault_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler._docvault_handler = True

    if structured:
        handler.setFormatter(StructuredFormatter(include_timestamp=include_timestamp))
    else:
        handler.setFormatter(HumanReadableFormatter(include_timestamp=include_timestamp))

    package_logger.addHandler(handler)
    return package_logger


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional logging level override
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
