"""
docvault: local snapshot history and diffs for a directory of text documents.

This package provides:
- Snapshot store: Delta-only, directory-per-version history on disk
- Diff engine: LCS-based unified diffs with hunk grouping
- Squash: Compaction of a contiguous run of versions
"""

from .api import create_snapshot, diff_files, list_snapshots, resolve_snapshot, squash_range
from .diff import FileDiff, FileStatus, compute_diff, diff_file, diff_snapshots
from .snapshot import Snapshot, SnapshotInfo, SnapshotStore, SquashResult

__version__ = "0.1.0"

__all__ = [
    "create_snapshot",
    "diff_files",
    "list_snapshots",
    "resolve_snapshot",
    "squash_range",
    "FileDiff",
    "FileStatus",
    "compute_diff",
    "diff_file",
    "diff_snapshots",
    "Snapshot",
    "SnapshotInfo",
    "SnapshotStore",
    "SquashResult",
]
