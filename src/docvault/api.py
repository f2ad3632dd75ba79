"""
Public entry points used by command-line and automation callers.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from .core.exceptions import InvalidSquashRangeError
from .diff.engine import FileDiff, diff_snapshots
from .snapshot.models import Snapshot, SnapshotInfo, SquashResult
from .snapshot.store import SnapshotStore, resolve_full_snapshot

logger = logging.getLogger(__name__)


def create_snapshot(project_root: Path, note: Optional[str] = None) -> SnapshotInfo:
    """Snapshot the project's tracked directory."""
    return SnapshotStore(project_root).create(note=note)


def list_snapshots(project_root: Path) -> List[Snapshot]:
    """All snapshots of a project, sorted by version."""
    return SnapshotStore(project_root).list()


def resolve_snapshot(history: List[Snapshot], index: int) -> Dict[str, str]:
    """Full path -> content mapping of the snapshot at position index."""
    return resolve_full_snapshot(history, index)


def diff_files(
    old_files: Dict[str, str],
    new_files: Dict[str, str],
    context_lines: int = 3,
) -> List[FileDiff]:
    """Per-file diffs between two path -> content mappings."""
    return diff_snapshots(old_files, new_files, context_lines)


def squash_range(
    project_root: Path,
    from_version: int,
    to_version: int,
    fold: bool = False,
) -> SquashResult:
    """
    Squash [from_version, to_version] into from_version.

    An invalid range is reported through the result rather than raised.
    """
    try:
        return SnapshotStore(project_root).squash(from_version, to_version, fold=fold)
    except InvalidSquashRangeError as e:
        logger.warning(str(e))
        return SquashResult(
            from_version=from_version,
            to_version=to_version,
            success=False,
            error=e.reason,
        )
