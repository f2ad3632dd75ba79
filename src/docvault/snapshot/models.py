"""
Core data models for the snapshot history.

Defines the Snapshot record persisted as ``.meta.json`` inside every storage
location, plus the result types returned by create and squash.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

META_FILE = ".meta.json"


@dataclass(frozen=True)
class GitInfo:
    """
    Source-control state captured when a snapshot was created.

    Attributes:
        commit: Short commit hash
        commit_full: Full commit hash
        branch: Current branch name
        dirty: Whether the working tree had uncommitted changes
        tag: Tag pointing exactly at the commit, if any
    """
    commit: str
    commit_full: str
    branch: str
    dirty: bool = False
    tag: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "commit": self.commit,
            "commitFull": self.commit_full,
            "branch": self.branch,
            "dirty": self.dirty,
        }
        if self.tag:
            data["tag"] = self.tag
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["GitInfo"]:
        if not isinstance(data, dict) or not data.get("commit"):
            return None
        return cls(
            commit=str(data["commit"]),
            commit_full=str(data.get("commitFull") or data["commit"]),
            branch=str(data.get("branch") or "HEAD"),
            dirty=bool(data.get("dirty", False)),
            tag=data.get("tag") or None,
        )


@dataclass
class Snapshot:
    """
    One version of the tracked directory.

    Attributes:
        version: Positive, unique, increasing in creation order
        timestamp: Normalized ISO timestamp (YYYY-MM-DDTHH:MM:SS)
        snapshot_dir: Storage location on disk
        files: Every relative path present in the tracked directory at this version
        changed_files: Paths physically stored here; None means all of files
        note: Free-text annotation
        git: Source-control state at creation time
        squashed_from: Versions absorbed into this one by a squash
        squashed_at: When the squash happened
    """
    version: int
    timestamp: str
    snapshot_dir: Path
    files: List[str] = field(default_factory=list)
    changed_files: Optional[List[str]] = None
    note: Optional[str] = None
    git: Optional[GitInfo] = None
    squashed_from: Optional[List[int]] = None
    squashed_at: Optional[str] = None

    @property
    def name(self) -> str:
        return self.snapshot_dir.name

    @property
    def meta_path(self) -> Path:
        return self.snapshot_dir / META_FILE

    def stored_files(self) -> List[str]:
        """Paths this snapshot claims to hold physically."""
        if self.changed_files is None:
            return list(self.files)
        return list(self.changed_files)

    def to_meta(self, raw_timestamp: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert to the on-disk metadata mapping (camelCase keys).

        Args:
            raw_timestamp: Timestamp string to persist (default: self.timestamp)
        """
        meta: Dict[str, Any] = {
            "version": self.version,
            "timestamp": raw_timestamp or self.timestamp,
            "files": list(self.files),
        }
        if self.changed_files is not None:
            meta["changedFiles"] = list(self.changed_files)
        if self.note:
            meta["note"] = self.note
        if self.git is not None:
            meta["git"] = self.git.to_dict()
        if self.squashed_from is not None:
            meta["squashedFrom"] = list(self.squashed_from)
        if self.squashed_at:
            meta["squashedAt"] = self.squashed_at
        return meta

    @classmethod
    def from_meta(
        cls,
        version: int,
        timestamp: str,
        snapshot_dir: Path,
        meta: Optional[Dict[str, Any]],
    ) -> "Snapshot":
        """
        Create from a parsed metadata mapping.

        Version and timestamp come from the directory name, which stays
        authoritative even when metadata is missing or disagrees.
        """
        meta = meta if isinstance(meta, dict) else {}

        files = meta.get("files")
        changed = meta.get("changedFiles")
        squashed_from = meta.get("squashedFrom")

        return cls(
            version=version,
            timestamp=timestamp,
            snapshot_dir=snapshot_dir,
            files=[str(f) for f in files] if isinstance(files, list) else [],
            changed_files=[str(f) for f in changed] if isinstance(changed, list) else None,
            note=meta.get("note") if isinstance(meta.get("note"), str) else None,
            git=GitInfo.from_dict(meta.get("git")),
            squashed_from=(
                [int(v) for v in squashed_from] if isinstance(squashed_from, list) else None
            ),
            squashed_at=meta.get("squashedAt") if isinstance(meta.get("squashedAt"), str) else None,
        )


@dataclass
class SnapshotInfo:
    """Result of creating a snapshot."""
    snapshot: Snapshot
    skipped_files: List[str] = field(default_factory=list)

    @property
    def version(self) -> int:
        return self.snapshot.version

    @property
    def files(self) -> List[str]:
        return self.snapshot.files

    @property
    def changed_files(self) -> List[str]:
        return self.snapshot.changed_files or []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.snapshot.timestamp,
            "snapshot_dir": str(self.snapshot.snapshot_dir),
            "files": list(self.files),
            "changed_files": list(self.changed_files),
            "skipped_files": list(self.skipped_files),
            "note": self.snapshot.note,
            "git": self.snapshot.git.to_dict() if self.snapshot.git else None,
        }


@dataclass
class SquashResult:
    """Report of a squash operation."""
    from_version: int
    to_version: int
    success: bool = True
    kept_version: Optional[int] = None
    deleted_versions: List[int] = field(default_factory=list)
    folded_files: List[str] = field(default_factory=list)
    squashed_at: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_version": self.from_version,
            "to_version": self.to_version,
            "success": self.success,
            "kept_version": self.kept_version,
            "deleted_versions": list(self.deleted_versions),
            "folded_files": list(self.folded_files),
            "squashed_at": self.squashed_at,
            "error": self.error,
        }

    def summary(self) -> str:
        """Get a human-readable summary."""
        if not self.success:
            return f"Squash v{self.from_version}-v{self.to_version} failed: {self.error}"
        lines = [
            f"Squashed v{self.from_version}-v{self.to_version} into v{self.kept_version}",
            f"  Deleted: {', '.join(f'v{v}' for v in self.deleted_versions) or 'none'}",
        ]
        if self.folded_files:
            lines.append(f"  Folded forward: {len(self.folded_files)} file(s)")
        return "\n".join(lines)
