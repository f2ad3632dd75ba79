"""
Plain-text rendering of file diffs in unified format.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from .engine import DiffHunk, FileDiff, FileStatus, LineType

_LINE_PREFIX = {
    LineType.ADD: "+",
    LineType.REMOVE: "-",
    LineType.CONTEXT: " ",
}

STATUS_CODES = {
    FileStatus.ADDED: "A",
    FileStatus.REMOVED: "D",
    FileStatus.MODIFIED: "M",
}


def format_hunk_header(hunk: DiffHunk) -> str:
    """Format a unified diff hunk header, e.g. ``@@ -1,3 +1,4 @@``."""
    old_range = f"{hunk.old_start}" if hunk.old_count == 1 else f"{hunk.old_start},{hunk.old_count}"
    new_range = f"{hunk.new_start}" if hunk.new_count == 1 else f"{hunk.new_start},{hunk.new_count}"
    return f"@@ -{old_range} +{new_range} @@"


def format_file_diff(fd: FileDiff) -> str:
    lines = [f"--- a/{fd.file_name}", f"+++ b/{fd.file_name}"]
    for hunk in fd.hunks:
        lines.append(format_hunk_header(hunk))
        for line in hunk.lines:
            lines.append(f"{_LINE_PREFIX[line.type]}{line.content}")
    return "\n".join(lines)


def format_diffs(diffs: Iterable[FileDiff]) -> str:
    """Render several file diffs separated by blank lines."""
    return "\n\n".join(format_file_diff(fd) for fd in diffs)


def format_file_list(diffs: Iterable[FileDiff]) -> str:
    """One ``  M  path`` line per changed file."""
    return "\n".join(f"  {STATUS_CODES.get(fd.status, '?')}  {fd.file_name}" for fd in diffs)


@dataclass
class DiffSummary:
    files_changed: int = 0
    modified: int = 0
    added: int = 0
    removed: int = 0
    additions: int = 0
    deletions: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "files_changed": self.files_changed,
            "modified": self.modified,
            "added": self.added,
            "removed": self.removed,
            "additions": self.additions,
            "deletions": self.deletions,
        }

    def describe(self) -> str:
        parts: List[str] = []
        if self.modified:
            parts.append(f"{self.modified} modified")
        if self.added:
            parts.append(f"{self.added} added")
        if self.removed:
            parts.append(f"{self.removed} removed")
        return (
            f"{self.files_changed} file(s) changed: {', '.join(parts) or 'none'}\n"
            f"+{self.additions} additions, -{self.deletions} deletions"
        )


def summarize(diffs: Iterable[FileDiff]) -> DiffSummary:
    summary = DiffSummary()
    for fd in diffs:
        summary.files_changed += 1
        if fd.status == FileStatus.MODIFIED:
            summary.modified += 1
        elif fd.status == FileStatus.ADDED:
            summary.added += 1
        elif fd.status == FileStatus.REMOVED:
            summary.removed += 1
        summary.additions += fd.additions
        summary.deletions += fd.deletions
    return summary
