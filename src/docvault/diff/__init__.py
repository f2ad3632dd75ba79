"""
Diff engine: LCS-based unified diffs between text blobs and file sets.
"""

from .engine import (
    DiffHunk,
    DiffLine,
    FileDiff,
    FileStatus,
    LineType,
    compute_diff,
    diff_file,
    diff_snapshots,
    edit_script,
    split_lines,
)
from .render import DiffSummary, format_diffs, format_file_diff, format_hunk_header, summarize

__all__ = [
    "DiffHunk",
    "DiffLine",
    "FileDiff",
    "FileStatus",
    "LineType",
    "compute_diff",
    "diff_file",
    "diff_snapshots",
    "edit_script",
    "split_lines",
    "DiffSummary",
    "format_diffs",
    "format_file_diff",
    "format_hunk_header",
    "summarize",
]
