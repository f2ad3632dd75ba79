"""
Unit tests for the LCS diff engine.
"""

import pytest

from docvault.diff.engine import (
    DiffLine,
    FileStatus,
    LineType,
    compute_diff,
    diff_file,
    diff_snapshots,
    edit_script,
    split_lines,
)


def numbered(count: int, replace: dict = None) -> str:
    replace = replace or {}
    return "".join(f"{replace.get(i, f'l{i}')}\n" for i in range(1, count + 1))


class TestSplitLines:
    """Tests for line splitting."""

    def test_drops_single_trailing_newline(self):
        assert split_lines("a\nb\n") == ["a", "b"]
        assert split_lines("a\nb") == ["a", "b"]

    def test_keeps_intentional_blank_lines(self):
        assert split_lines("a\n\n") == ["a", ""]

    def test_empty_string(self):
        assert split_lines("") == []


class TestComputeDiff:
    """Tests for compute_diff."""

    def test_single_line_substitution(self):
        hunks = compute_diff("a\nb\nc\n", "a\nx\nc\n")

        assert len(hunks) == 1
        hunk = hunks[0]
        assert hunk.lines == [
            DiffLine(LineType.CONTEXT, "a"),
            DiffLine(LineType.REMOVE, "b"),
            DiffLine(LineType.ADD, "x"),
            DiffLine(LineType.CONTEXT, "c"),
        ]
        assert (hunk.old_start, hunk.old_count) == (1, 3)
        assert (hunk.new_start, hunk.new_count) == (1, 3)

    @pytest.mark.parametrize("text", ["", "a", "a\nb\nc\n", "\n\n\n", "same\nlines\nsame\n"])
    def test_identical_input_has_no_hunks(self, text):
        assert compute_diff(text, text) == []

    def test_trailing_newline_is_not_a_change(self):
        assert compute_diff("a\nb", "a\nb\n") == []

    def test_equal_scores_emit_removal_before_addition(self):
        assert edit_script("a", "b") == [
            DiffLine(LineType.REMOVE, "a"),
            DiffLine(LineType.ADD, "b"),
        ]

    def test_empty_to_content(self):
        hunks = compute_diff("", "a\nb\n")

        assert len(hunks) == 1
        assert [line.type for line in hunks[0].lines] == [LineType.ADD, LineType.ADD]
        assert hunks[0].old_count == 0
        assert hunks[0].new_count == 2

    def test_distant_changes_form_separate_hunks(self):
        old = numbered(20)
        new = numbered(20, {2: "X", 19: "Y"})

        hunks = compute_diff(old, new)

        assert len(hunks) == 2
        first, second = hunks
        assert (first.old_start, first.old_count, first.new_start, first.new_count) == (1, 5, 1, 5)
        assert (second.old_start, second.old_count, second.new_start, second.new_count) == (16, 5, 16, 5)
        assert [line.content for line in second.lines] == ["l16", "l17", "l18", "l19", "Y", "l20"]

    def test_nearby_changes_merge_into_one_hunk(self):
        old = numbered(12)
        new = numbered(12, {3: "X", 9: "Y"})

        hunks = compute_diff(old, new)

        assert len(hunks) == 1
        assert hunks[0].old_start == 1
        assert hunks[0].old_count == 12

    def test_context_lines_is_configurable(self):
        old = numbered(12)
        new = numbered(12, {3: "X", 9: "Y"})

        hunks = compute_diff(old, new, context_lines=1)

        assert len(hunks) == 2
        assert [line.content for line in hunks[0].lines] == ["l2", "l3", "X", "l4"]
        assert hunks[0].old_start == 2
        assert hunks[1].old_start == 8

    def test_every_change_lands_in_exactly_one_hunk(self):
        old = numbered(40, {5: "five", 6: "six", 30: "thirty"})
        new = numbered(42, {1: "first", 6: "SIX", 22: "twenty-two", 41: "extra"})

        script = edit_script(old, new)
        changed = [line for line in script if line.type != LineType.CONTEXT]
        hunks = compute_diff(old, new)
        in_hunks = [line for h in hunks for line in h.lines if line.type != LineType.CONTEXT]

        assert in_hunks == changed
        for hunk in hunks:
            assert hunk.old_count == sum(1 for line in hunk.lines if line.type != LineType.ADD)
            assert hunk.new_count == sum(1 for line in hunk.lines if line.type != LineType.REMOVE)

    def test_hunks_are_ordered_and_disjoint(self):
        old = numbered(60)
        new = numbered(60, {3: "a", 25: "b", 50: "c"})

        hunks = compute_diff(old, new)

        assert len(hunks) == 3
        for before, after in zip(hunks, hunks[1:]):
            assert before.old_start + before.old_count < after.old_start


class TestDiffFile:
    """Tests for per-file classification."""

    def test_added_file_is_one_hunk_of_additions(self):
        fd = diff_file("new.md", None, "one\ntwo\nthree\n")

        assert fd.status == FileStatus.ADDED
        assert len(fd.hunks) == 1
        hunk = fd.hunks[0]
        assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (0, 0, 1, 3)
        assert all(line.type == LineType.ADD for line in hunk.lines)
        assert fd.additions == 3
        assert fd.deletions == 0

    def test_removed_file_is_one_hunk_of_removals(self):
        fd = diff_file("old.md", "one\ntwo\n", None)

        assert fd.status == FileStatus.REMOVED
        assert len(fd.hunks) == 1
        hunk = fd.hunks[0]
        assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (1, 2, 0, 0)
        assert [line.content for line in hunk.lines] == ["one", "two"]
        assert all(line.type == LineType.REMOVE for line in hunk.lines)

    def test_whole_file_hunks_skip_context_trimming(self):
        content = numbered(30)
        fd = diff_file("big.md", None, content)

        assert len(fd.hunks[0].lines) == 30

    def test_added_empty_file_has_no_hunks(self):
        fd = diff_file("empty.md", None, "")

        assert fd.status == FileStatus.ADDED
        assert fd.hunks == []

    def test_unchanged(self):
        assert diff_file("a.md", None, None).status == FileStatus.UNCHANGED
        fd = diff_file("a.md", "x\n", "x\n")
        assert fd.status == FileStatus.UNCHANGED
        assert fd.hunks == []

    def test_modified(self):
        fd = diff_file("a.md", "a\nb\nc\n", "a\nx\nc\n")

        assert fd.status == FileStatus.MODIFIED
        assert fd.additions == 1
        assert fd.deletions == 1


class TestDiffSnapshots:
    """Tests for diffing path -> content mappings."""

    def test_sorted_and_unchanged_omitted(self):
        old = {"b.md": "same\n", "c.md": "gone\n", "a.md": "old\n"}
        new = {"b.md": "same\n", "a.md": "new\n", "d/e.md": "fresh\n"}

        diffs = diff_snapshots(old, new)

        assert [d.file_name for d in diffs] == ["a.md", "c.md", "d/e.md"]
        assert [d.status for d in diffs] == [
            FileStatus.MODIFIED,
            FileStatus.REMOVED,
            FileStatus.ADDED,
        ]

    def test_identical_sets(self):
        files = {"a.md": "x\n", "b.md": "y\n"}
        assert diff_snapshots(files, dict(files)) == []

    def test_empty_sets(self):
        assert diff_snapshots({}, {}) == []
