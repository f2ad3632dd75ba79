"""
Snapshot history store.

This module provides:
- Snapshot: One recorded version of the tracked directory
- SnapshotStore: Create, list, annotate and squash snapshots on disk
- Delta-chain resolution: Reconstruct any file or full version
- Timestamp codec: Compact and legacy directory-name encodings
"""

from .models import GitInfo, Snapshot, SnapshotInfo, SquashResult
from .store import (
    SnapshotStore,
    compact_history,
    find_index,
    next_version,
    resolve_file_content,
    resolve_full_snapshot,
)
from .timestamps import decode_timestamp, encode_timestamp

__all__ = [
    "GitInfo",
    "Snapshot",
    "SnapshotInfo",
    "SquashResult",
    "SnapshotStore",
    "compact_history",
    "find_index",
    "next_version",
    "resolve_file_content",
    "resolve_full_snapshot",
    "decode_timestamp",
    "encode_timestamp",
]
