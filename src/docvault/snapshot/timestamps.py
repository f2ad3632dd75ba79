"""
Snapshot timestamp and directory-name encoding.

Two on-disk encodings exist:
- compact (written):  20260225T163000
- legacy (read-only): 2026-02-25T16-30-00

Both decode to the ISO form 2026-02-25T16:30:00, which sorts correctly as a
plain string.
"""

import re
from datetime import datetime, timezone
from typing import Optional, Tuple

from ..core.exceptions import InvalidTimestampError

COMPACT_FORMAT = "%Y%m%dT%H%M%S"
LEGACY_FORMAT = "%Y-%m-%dT%H-%M-%S"
ISO_FORMAT = "%Y-%m-%dT%H:%M:%S"

_COMPACT_RE = re.compile(r"^\d{8}T\d{6}$")
_LEGACY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}$")
_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")
_DIR_NAME_RE = re.compile(r"^v(\d+)-(.+)$")


def encode_timestamp(moment: Optional[datetime] = None) -> str:
    """Encode a moment (default: now, UTC) in the compact on-disk form."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(COMPACT_FORMAT)


def decode_timestamp(raw: str) -> str:
    """
    Decode a compact, legacy or already-normalized timestamp to ISO form.

    Raises:
        InvalidTimestampError: if raw matches none of the known encodings
    """
    if _COMPACT_RE.match(raw):
        fmt = COMPACT_FORMAT
    elif _LEGACY_RE.match(raw):
        fmt = LEGACY_FORMAT
    elif _ISO_RE.match(raw):
        fmt = ISO_FORMAT
    else:
        raise InvalidTimestampError(raw)

    try:
        return datetime.strptime(raw, fmt).strftime(ISO_FORMAT)
    except ValueError as e:
        raise InvalidTimestampError(raw) from e


def normalize_timestamp(raw: str) -> str:
    """Like decode_timestamp, but returns raw unchanged when it cannot be parsed."""
    try:
        return decode_timestamp(raw)
    except InvalidTimestampError:
        return raw


def canonical_timestamp(raw: str) -> str:
    """Re-encode any known timestamp form as compact; unknown input is returned as is."""
    try:
        iso = decode_timestamp(raw)
    except InvalidTimestampError:
        return raw
    return datetime.strptime(iso, ISO_FORMAT).strftime(COMPACT_FORMAT)


def format_snapshot_dir_name(version: int, timestamp: str) -> str:
    """Build a storage location name: v<version>-<compact timestamp>."""
    return f"v{version}-{timestamp}"


def parse_snapshot_dir_name(name: str) -> Optional[Tuple[int, str]]:
    """
    Parse a storage location name.

    Returns:
        (version, raw timestamp) or None if the name is not a snapshot directory
    """
    match = _DIR_NAME_RE.match(name)
    if not match:
        return None
    return int(match.group(1)), match.group(2)
