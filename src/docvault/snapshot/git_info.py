"""
Capture of git state for snapshot metadata.

Git state is descriptive only; every failure here degrades to None.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from .models import GitInfo

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10


def is_git_repo(path: Path) -> bool:
    """Check whether a directory is the root of a git working tree."""
    return (Path(path) / ".git").exists()


def _git(path: Path, args: List[str]) -> Optional[str]:
    """Run a git command and return its stripped stdout, or None on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(path),
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"git {' '.join(args)} failed: {e}")
        return None

    if result.returncode != 0:
        return None
    return result.stdout.strip()


def get_git_info(path: Path) -> Optional[GitInfo]:
    """
    Collect current git state for a project root.

    Returns:
        GitInfo, or None if path is not a git repository or has no commits
    """
    path = Path(path)
    if not is_git_repo(path):
        return None

    commit_full = _git(path, ["rev-parse", "HEAD"])
    if not commit_full:
        return None

    commit = _git(path, ["rev-parse", "--short", "HEAD"]) or commit_full[:7]
    branch = _git(path, ["rev-parse", "--abbrev-ref", "HEAD"]) or "HEAD"

    status = _git(path, ["status", "--porcelain"])
    dirty = bool(status)

    tag = _git(path, ["describe", "--tags", "--exact-match"]) or None

    return GitInfo(
        commit=commit,
        commit_full=commit_full,
        branch=branch,
        dirty=dirty,
        tag=tag,
    )


def format_git_info(info: GitInfo) -> str:
    """Render git state as a one-line human-readable string."""
    parts = [f"commit: {info.commit}", f"branch: {info.branch}"]
    if info.tag:
        parts.append(f"tag: {info.tag}")
    if info.dirty:
        parts.append("(uncommitted changes)")
    return " · ".join(parts)
