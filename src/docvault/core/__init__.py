"""
Core subpackage for docvault.

Contains exceptions and logging utilities.
"""

from .exceptions import (
    DocvaultError,
    VersionNotFoundError,
    InvalidSquashRangeError,
    SnapshotStorageError,
    InvalidTimestampError,
    ConfigError,
)
from .logging import configure_logging, get_logger

__all__ = [
    # Exceptions
    "DocvaultError",
    "VersionNotFoundError",
    "InvalidSquashRangeError",
    "SnapshotStorageError",
    "InvalidTimestampError",
    "ConfigError",
    # Logging
    "configure_logging",
    "get_logger",
]
