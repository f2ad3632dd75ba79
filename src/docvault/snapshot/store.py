"""
Directory-per-version snapshot history.

Layout:
    {history_dir}/
        v1-20260225T163000/
            .meta.json
            plan.md
            notes/ideas.md
        v2-20260225T170512/
            .meta.json
            plan.md              # only files that changed since v1

A snapshot physically stores only the files whose content differs from the
previous snapshot. The content of a file at any version is the most recent
stored copy at or before that version (see resolve_file_content).
"""

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..config.config_loader import ProjectConfig
from ..core.exceptions import (
    InvalidSquashRangeError,
    SnapshotStorageError,
    VersionNotFoundError,
)
from ..diff.engine import diff_snapshots
from .git_info import get_git_info
from .models import META_FILE, Snapshot, SnapshotInfo, SquashResult
from .timestamps import (
    canonical_timestamp,
    encode_timestamp,
    format_snapshot_dir_name,
    normalize_timestamp,
    parse_snapshot_dir_name,
)

logger = logging.getLogger(__name__)


# ========== History helpers ==========

def read_content(path: Path) -> str:
    """
    Read a file as UTF-8 exactly as stored on disk.

    Line endings are not translated, so CRLF and LF content compare unequal.

    Raises:
        OSError: if the file cannot be read
        UnicodeDecodeError: if the file is not valid UTF-8
    """
    return path.read_bytes().decode("utf-8")


def write_content(path: Path, content: str) -> None:
    """Write content as UTF-8 without line-ending translation."""
    path.write_bytes(content.encode("utf-8"))


def next_version(history: List[Snapshot]) -> int:
    """
    Version number for the next snapshot.

    Equals len(history) + 1 for a history that was never squashed; after a
    squash it stays above every surviving version.
    """
    if not history:
        return 1
    return max(len(history), max(s.version for s in history)) + 1


def find_index(history: List[Snapshot], version: int) -> int:
    """
    Position of a version in the history.

    Raises:
        VersionNotFoundError: if no snapshot carries that version
    """
    for index, snapshot in enumerate(history):
        if snapshot.version == version:
            return index
    raise VersionNotFoundError(version, [s.version for s in history])


def resolve_file_content(history: List[Snapshot], from_index: int, path: str) -> Optional[str]:
    """
    Content of path as of history[from_index].

    Walks backwards from from_index (inclusive) to the first snapshot; the
    first storage location that physically holds the file wins.

    Returns:
        File content, or None if no snapshot in range stores the file
    """
    for index in range(from_index, -1, -1):
        candidate = history[index].snapshot_dir / path
        if candidate.is_file():
            try:
                return read_content(candidate)
            except (OSError, UnicodeDecodeError) as e:
                raise SnapshotStorageError("read_snapshot_file", str(candidate), e)
    return None


def resolve_full_snapshot(history: List[Snapshot], target_index: int) -> Dict[str, str]:
    """
    Reconstruct every file listed by history[target_index].

    Files that cannot be resolved (storage damaged out of band) are left out
    of the result and logged.
    """
    target = history[target_index]
    files: Dict[str, str] = {}

    for path in target.files:
        content = resolve_file_content(history, target_index, path)
        if content is None:
            logger.warning(f"v{target.version}: no stored copy of {path} at or before this version")
            continue
        files[path] = content

    return files


def compact_history(
    history: List[Snapshot],
    threshold: int = 5,
) -> Tuple[List[Snapshot], List[int]]:
    """
    Hide snapshots with only minor changes.

    The first snapshot is always shown. Every later snapshot is shown when
    the number of added plus removed lines against its predecessor reaches
    threshold.

    Returns:
        (shown snapshots, hidden versions)
    """
    if len(history) < 2:
        return list(history), []

    shown = [history[0]]
    hidden: List[int] = []
    previous = resolve_full_snapshot(history, 0)

    for index in range(1, len(history)):
        current = resolve_full_snapshot(history, index)
        changed_lines = sum(
            fd.additions + fd.deletions for fd in diff_snapshots(previous, current)
        )
        if changed_lines < threshold:
            hidden.append(history[index].version)
        else:
            shown.append(history[index])
        previous = current

    return shown, hidden


# ========== Store ==========

class SnapshotStore:
    """
    Snapshot history of one project's tracked directory.

    All operations are synchronous and assume a single writer. Content is
    always written before metadata, and metadata is replaced atomically.
    """

    resolve_file_content = staticmethod(resolve_file_content)
    resolve_full_snapshot = staticmethod(resolve_full_snapshot)
    find_index = staticmethod(find_index)
    next_version = staticmethod(next_version)

    def __init__(self, project_root: Path, config: Optional[ProjectConfig] = None):
        """
        Initialize the store.

        Args:
            project_root: Root directory of the project
            config: Project configuration (loaded from project_root if not provided)
        """
        self.project_root = Path(project_root).resolve()
        self.config = config or ProjectConfig(self.project_root)
        self.docs_dir = self.config.docs_dir
        self.history_dir = self.config.history_dir
        self.extension = self.config.extension

    # ========== Working copy ==========

    def tracked_files(self) -> List[str]:
        """Relative POSIX paths of all tracked files currently on disk."""
        if not self.docs_dir.is_dir():
            return []

        history_dir = self.history_dir.resolve()
        files = []
        for path in self.docs_dir.rglob(f"*{self.extension}"):
            if not path.is_file():
                continue
            resolved = path.resolve()
            if resolved == history_dir or history_dir in resolved.parents:
                continue
            files.append(path.relative_to(self.docs_dir).as_posix())

        return sorted(files)

    def _read_tracked(self, rel_path: str) -> Optional[str]:
        """
        Read one tracked file.

        Returns:
            File content, or None (logged) if the file is not valid UTF-8

        Raises:
            SnapshotStorageError: if the file cannot be read at all
        """
        src = self.docs_dir / rel_path
        try:
            return read_content(src)
        except UnicodeDecodeError as e:
            logger.warning(f"Skipping {rel_path}: not valid UTF-8 ({e})")
            return None
        except OSError as e:
            raise SnapshotStorageError("read_tracked_file", str(src), e)

    def read_working_copy(self) -> Dict[str, str]:
        """Read the live tracked directory as a path -> content mapping."""
        files: Dict[str, str] = {}
        for rel_path in self.tracked_files():
            content = self._read_tracked(rel_path)
            if content is not None:
                files[rel_path] = content
        return files

    # ========== Listing ==========

    def list(self) -> List[Snapshot]:
        """
        Load every snapshot, sorted by version.

        Storage locations with missing or malformed metadata are still listed,
        with an empty file listing.
        """
        if not self.history_dir.exists():
            return []

        try:
            entries = sorted(self.history_dir.iterdir())
        except OSError as e:
            raise SnapshotStorageError("list_snapshots", str(self.history_dir), e)

        snapshots: Dict[int, Snapshot] = {}
        for entry in entries:
            parsed = parse_snapshot_dir_name(entry.name)
            if parsed is None or not entry.is_dir():
                continue

            version, raw_timestamp = parsed
            if version in snapshots:
                logger.warning(
                    f"Ignoring {entry.name}: v{version} already loaded from "
                    f"{snapshots[version].name}"
                )
                continue

            snapshots[version] = self._load_snapshot(entry, version, raw_timestamp)

        return [snapshots[v] for v in sorted(snapshots)]

    def _load_snapshot(self, snapshot_dir: Path, version: int, raw_timestamp: str) -> Snapshot:
        timestamp = normalize_timestamp(raw_timestamp)
        meta_path = snapshot_dir / META_FILE
        meta = None

        if meta_path.exists():
            try:
                meta = json.loads(meta_path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning(f"Unreadable metadata in {snapshot_dir.name}, using defaults: {e}")
        else:
            logger.warning(f"No metadata in {snapshot_dir.name}, using defaults")

        try:
            return Snapshot.from_meta(version, timestamp, snapshot_dir, meta)
        except (TypeError, ValueError) as e:
            logger.warning(f"Malformed metadata in {snapshot_dir.name}, using defaults: {e}")
            return Snapshot.from_meta(version, timestamp, snapshot_dir, None)

    # ========== Creation ==========

    def create(self, note: Optional[str] = None) -> SnapshotInfo:
        """
        Snapshot the tracked directory.

        Files whose content equals their resolved content at the latest
        snapshot are listed but not copied. Comparison is exact, line endings
        included. An empty or missing tracked directory still yields a
        snapshot with no files. Files that are not valid UTF-8 are skipped with
        a warning, as in read_working_copy.
        """
        history = self.list()
        version = next_version(history)
        raw_timestamp = encode_timestamp()
        snapshot_dir = self.history_dir / format_snapshot_dir_name(version, raw_timestamp)

        try:
            snapshot_dir.mkdir(parents=True)
        except OSError as e:
            raise SnapshotStorageError("create_snapshot", str(snapshot_dir), e)

        files: List[str] = []
        changed: List[str] = []
        skipped: List[str] = []

        try:
            for rel_path in self.tracked_files():
                new_content = self._read_tracked(rel_path)
                if new_content is None:
                    continue
                files.append(rel_path)

                if history:
                    previous = resolve_file_content(history, len(history) - 1, rel_path)
                    if previous is not None and previous == new_content:
                        skipped.append(rel_path)
                        continue

                dest = snapshot_dir / rel_path
                dest.parent.mkdir(parents=True, exist_ok=True)
                write_content(dest, new_content)
                changed.append(rel_path)

            snapshot = Snapshot(
                version=version,
                timestamp=normalize_timestamp(raw_timestamp),
                snapshot_dir=snapshot_dir,
                files=files,
                changed_files=changed,
                note=note or None,
                git=get_git_info(self.project_root) if self.config.track_git else None,
            )
            self._write_meta(snapshot)

        except (OSError, UnicodeDecodeError, SnapshotStorageError) as e:
            shutil.rmtree(snapshot_dir, ignore_errors=True)
            if isinstance(e, SnapshotStorageError):
                raise
            raise SnapshotStorageError("create_snapshot", str(snapshot_dir), e)

        logger.info(
            f"Created v{version}: {len(changed)} changed, {len(skipped)} unchanged",
            extra={"version": version},
        )
        return SnapshotInfo(snapshot=snapshot, skipped_files=skipped)

    # ========== Amendments ==========

    def annotate(self, version: int, note: Optional[str]) -> Snapshot:
        """Set or clear the note of an existing snapshot."""
        history = self.list()
        snapshot = history[find_index(history, version)]
        snapshot.note = note or None
        self._write_meta(snapshot)
        logger.info(f"Updated note on v{version}", extra={"version": version})
        return snapshot

    def squash(self, from_version: int, to_version: int, fold: bool = False) -> SquashResult:
        """
        Merge the snapshots in [from_version, to_version] into the first one.

        The first snapshot in range is kept and records the absorbed versions
        in squashedFrom; the others are deleted. Without fold, files changed
        only inside the deleted range are lost, and later snapshots that did
        not store such a file resolve it to its pre-range content. With fold,
        the kept snapshot is first rewritten to hold the state of the last
        snapshot in range, plus every in-range copy a later snapshot relies on.
        The kept snapshot's metadata is written only after the absorbed
        storage locations are gone.

        Raises:
            InvalidSquashRangeError: before any change, if the range is invalid
        """
        if from_version >= to_version:
            raise InvalidSquashRangeError(
                from_version, to_version, "first version must be less than second version"
            )

        history = self.list()
        in_range = [s for s in history if from_version <= s.version <= to_version]
        if len(in_range) < 2:
            raise InvalidSquashRangeError(
                from_version,
                to_version,
                f"need at least 2 versions in range, found {len(in_range)}",
            )

        keep, absorbed = in_range[0], in_range[1:]
        result = SquashResult(
            from_version=from_version,
            to_version=to_version,
            kept_version=keep.version,
            deleted_versions=[s.version for s in absorbed],
            squashed_at=datetime.now(timezone.utc).isoformat(),
        )

        at_risk = self._files_reverted_by_squash(history, absorbed)
        if fold:
            result.folded_files = self._fold_forward(history, keep, absorbed[-1], at_risk)
        elif at_risk:
            logger.warning(
                f"Squash drops changes to {len(at_risk)} file(s) that later versions "
                f"do not store: {', '.join(at_risk)}"
            )

        for snapshot in absorbed:
            try:
                if snapshot.snapshot_dir.exists():
                    shutil.rmtree(snapshot.snapshot_dir)
            except OSError as e:
                raise SnapshotStorageError("delete_snapshot", str(snapshot.snapshot_dir), e)

        keep.squashed_from = [s.version for s in in_range]
        keep.squashed_at = result.squashed_at
        self._write_meta(keep)

        logger.info(
            f"Squashed v{from_version}-v{to_version} into v{keep.version}, "
            f"deleted {len(absorbed)} version(s)",
            extra={"version": keep.version},
        )
        return result

    def _fold_forward(
        self,
        history: List[Snapshot],
        keep: Snapshot,
        last: Snapshot,
        reverted: List[str],
    ) -> List[str]:
        """
        Rewrite keep's storage so nothing after the range changes on deletion.

        Every file listed at last gets last's content. Files in reverted (stored
        inside the range and relied on by a later snapshot, though no longer
        listed at last) get their last in-range stored copy.
        """
        keep_index = history.index(keep)
        last_index = history.index(last)
        folded: List[str] = []

        for path in sorted(set(last.files) | set(reverted)):
            content = resolve_file_content(history, last_index, path)
            if content is None:
                continue
            if resolve_file_content(history, keep_index, path) == content:
                continue

            dest = keep.snapshot_dir / path
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                write_content(dest, content)
            except OSError as e:
                raise SnapshotStorageError("fold_snapshot_file", str(dest), e)
            folded.append(path)

        keep.files = list(last.files)
        if keep.changed_files is not None:
            keep.changed_files = sorted(set(keep.changed_files) | set(folded))
        return folded

    @staticmethod
    def _files_reverted_by_squash(history: List[Snapshot], absorbed: List[Snapshot]) -> List[str]:
        """
        Files whose next surviving listing after the range relies on a copy
        stored inside the range.
        """
        absorbed_versions = {s.version for s in absorbed}
        last_absorbed = max(absorbed_versions)
        later = [s for s in history if s.version > last_absorbed]

        stored_in_range = set()
        for snapshot in absorbed:
            for path in snapshot.stored_files():
                if (snapshot.snapshot_dir / path).is_file():
                    stored_in_range.add(path)

        at_risk = []
        for path in sorted(stored_in_range):
            for snapshot in later:
                if path not in snapshot.files:
                    continue
                if not (snapshot.snapshot_dir / path).is_file():
                    at_risk.append(path)
                break
        return at_risk

    # ========== Metadata I/O ==========

    def _write_meta(self, snapshot: Snapshot) -> None:
        """Write .meta.json atomically (temp file + rename)."""
        parsed = parse_snapshot_dir_name(snapshot.name)
        raw_timestamp = canonical_timestamp(parsed[1] if parsed else snapshot.timestamp)
        data = json.dumps(snapshot.to_meta(raw_timestamp), indent=2, ensure_ascii=False)

        fd = None
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=str(snapshot.snapshot_dir), prefix=".tmp_", suffix=".json"
            )
            os.write(fd, data.encode("utf-8"))
            os.close(fd)
            fd = None
            os.replace(temp_path, snapshot.meta_path)
            temp_path = None
        except OSError as e:
            raise SnapshotStorageError("write_metadata", str(snapshot.meta_path), e)
        finally:
            if fd is not None:
                os.close(fd)
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)
