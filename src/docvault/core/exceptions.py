"""
Custom exceptions for the docvault package.
"""


class DocvaultError(Exception):
    """Base exception for all docvault errors."""
    pass


class VersionNotFoundError(DocvaultError):
    """
    Requested snapshot version does not exist in the history.

    Raised by explicit lookups by version number. Resolving a file that is
    missing from every snapshot is not an error and returns None instead.
    """

    def __init__(self, version: int, available: list = None):
        self.version = version
        self.available = available or []
        msg = f"Version v{version} not found"
        if self.available:
            msg += f" (available: {', '.join(f'v{v}' for v in self.available)})"
        super().__init__(msg)


class InvalidSquashRangeError(DocvaultError):
    """
    Squash range violates its preconditions.

    Raised when:
    - from_version is not lower than to_version
    - fewer than two snapshots fall inside the range
    """

    def __init__(self, from_version: int, to_version: int, reason: str):
        self.from_version = from_version
        self.to_version = to_version
        self.reason = reason
        super().__init__(f"Cannot squash v{from_version}-v{to_version}: {reason}")


class SnapshotStorageError(DocvaultError):
    """Raised when a filesystem operation on the history fails."""

    def __init__(self, operation: str, path: str, cause: Exception = None):
        self.operation = operation
        self.path = path
        self.cause = cause
        msg = f"Storage error during {operation}: {path}"
        if cause:
            msg += f"\nCause: {cause}"
        super().__init__(msg)


class InvalidTimestampError(DocvaultError):
    """Raised when a snapshot timestamp matches neither supported encoding."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Unrecognized snapshot timestamp: {raw!r}")


class ConfigError(DocvaultError):
    """
    Error in project configuration.

    Raised when:
    - The config file exists but cannot be parsed
    - The config file does not contain a mapping
    """
    pass
