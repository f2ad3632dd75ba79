"""
Line-level unified diff based on the longest common subsequence.

Pure functions, no file I/O. The LCS table is O(n*m) in time and space,
which is fine for documents of up to roughly a thousand lines.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

DEFAULT_CONTEXT_LINES = 3


class LineType(str, Enum):
    """Kind of a line in an edit script."""
    ADD = "add"
    REMOVE = "remove"
    CONTEXT = "context"


class FileStatus(str, Enum):
    """How a file differs between two versions."""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffLine:
    type: LineType
    content: str


@dataclass
class DiffHunk:
    """
    A contiguous block of changed lines with surrounding context.

    Start positions are 1-based; a start of 0 with a count of 0 denotes an
    empty side (whole-file additions and removals).
    """
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: List[DiffLine] = field(default_factory=list)


@dataclass
class FileDiff:
    file_name: str
    status: FileStatus
    hunks: List[DiffHunk] = field(default_factory=list)

    @property
    def additions(self) -> int:
        return sum(1 for h in self.hunks for line in h.lines if line.type == LineType.ADD)

    @property
    def deletions(self) -> int:
        return sum(1 for h in self.hunks for line in h.lines if line.type == LineType.REMOVE)


def split_lines(content: str) -> List[str]:
    """Split on newlines, dropping the single empty tail left by a final newline."""
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _lcs_table(a: List[str], b: List[str]) -> List[List[int]]:
    n, m = len(a), len(b)
    dp = [[0] * (m + 1) for _ in range(n + 1)]

    for i in range(1, n + 1):
        row, prev = dp[i], dp[i - 1]
        for j in range(1, m + 1):
            if a[i - 1] == b[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    return dp


def _backtrack(dp: List[List[int]], a: List[str], b: List[str]) -> List[DiffLine]:
    """
    Walk the LCS table back to the origin, producing the edit script.

    On equal scores insertion is preferred over removal, so output is
    deterministic.
    """
    result: List[DiffLine] = []
    i, j = len(a), len(b)

    while i > 0 or j > 0:
        if i > 0 and j > 0 and a[i - 1] == b[j - 1]:
            result.append(DiffLine(LineType.CONTEXT, a[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i][j - 1] >= dp[i - 1][j]):
            result.append(DiffLine(LineType.ADD, b[j - 1]))
            j -= 1
        else:
            result.append(DiffLine(LineType.REMOVE, a[i - 1]))
            i -= 1

    result.reverse()
    return result


def edit_script(old_content: str, new_content: str) -> List[DiffLine]:
    """Compute the flat, forward-ordered edit script between two texts."""
    old_lines = split_lines(old_content)
    new_lines = split_lines(new_content)
    return _backtrack(_lcs_table(old_lines, new_lines), old_lines, new_lines)


def _build_hunk(lines: List[DiffLine], start: int, end: int) -> DiffHunk:
    old_line = 1
    new_line = 1
    for line in lines[:start]:
        if line.type != LineType.ADD:
            old_line += 1
        if line.type != LineType.REMOVE:
            new_line += 1

    hunk_lines = lines[start:end + 1]
    old_count = sum(1 for line in hunk_lines if line.type != LineType.ADD)
    new_count = sum(1 for line in hunk_lines if line.type != LineType.REMOVE)

    return DiffHunk(
        old_start=old_line,
        old_count=old_count,
        new_start=new_line,
        new_count=new_count,
        lines=hunk_lines,
    )


def group_into_hunks(
    lines: List[DiffLine],
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> List[DiffHunk]:
    """
    Group an edit script into hunks.

    Each changed line gets up to context_lines of context on either side;
    windows that overlap or touch are merged into one hunk.
    """
    change_indices = [i for i, line in enumerate(lines) if line.type != LineType.CONTEXT]
    if not change_indices:
        return []

    last = len(lines) - 1
    hunks: List[DiffHunk] = []
    hunk_start = max(0, change_indices[0] - context_lines)
    hunk_end = min(last, change_indices[0] + context_lines)

    for index in change_indices[1:]:
        next_start = max(0, index - context_lines)
        next_end = min(last, index + context_lines)

        if next_start <= hunk_end + 1:
            hunk_end = next_end
        else:
            hunks.append(_build_hunk(lines, hunk_start, hunk_end))
            hunk_start, hunk_end = next_start, next_end

    hunks.append(_build_hunk(lines, hunk_start, hunk_end))
    return hunks


def compute_diff(
    old_content: str,
    new_content: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> List[DiffHunk]:
    """Compute unified diff hunks between two strings."""
    return group_into_hunks(edit_script(old_content, new_content), context_lines)


def diff_file(
    file_name: str,
    old_content: Optional[str],
    new_content: Optional[str],
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> FileDiff:
    """
    Diff a single file between two versions.

    None stands for "file absent in that version". Added and removed files
    get one hunk spanning the whole content (none when the content is empty).
    """
    if old_content is None and new_content is None:
        return FileDiff(file_name, FileStatus.UNCHANGED)

    if old_content is None:
        lines = [DiffLine(LineType.ADD, line) for line in split_lines(new_content)]
        hunks = [DiffHunk(0, 0, 1, len(lines), lines)] if lines else []
        return FileDiff(file_name, FileStatus.ADDED, hunks)

    if new_content is None:
        lines = [DiffLine(LineType.REMOVE, line) for line in split_lines(old_content)]
        hunks = [DiffHunk(1, len(lines), 0, 0, lines)] if lines else []
        return FileDiff(file_name, FileStatus.REMOVED, hunks)

    if old_content == new_content:
        return FileDiff(file_name, FileStatus.UNCHANGED)

    return FileDiff(
        file_name,
        FileStatus.MODIFIED,
        compute_diff(old_content, new_content, context_lines),
    )


def diff_snapshots(
    old_files: Dict[str, str],
    new_files: Dict[str, str],
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> List[FileDiff]:
    """
    Diff two path -> content mappings.

    Paths are visited in sorted order; unchanged files are left out.
    """
    diffs: List[FileDiff] = []
    for name in sorted(set(old_files) | set(new_files)):
        fd = diff_file(name, old_files.get(name), new_files.get(name), context_lines)
        if fd.status != FileStatus.UNCHANGED:
            diffs.append(fd)
    return diffs
