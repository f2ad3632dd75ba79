"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from docvault.config.config_loader import init_project  # noqa: E402
from docvault.snapshot.store import SnapshotStore  # noqa: E402


logger = logging.getLogger(__name__)


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment overrides out of the tests."""
    for var in ("DOCVAULT_DOCS_DIR", "DOCVAULT_HISTORY_DIR", "DOCVAULT_TRACK_GIT"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by configure_logging during a test."""
    yield
    package_logger = logging.getLogger("docvault")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_docvault_handler", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """An initialized project with git capture disabled."""
    root = tmp_path / "project"
    root.mkdir()
    init_project(root, track_git=False)
    return root


@pytest.fixture
def store(project_root: Path) -> SnapshotStore:
    """Snapshot store for the initialized project."""
    return SnapshotStore(project_root)


@pytest.fixture
def write_doc(store: SnapshotStore):
    """Write a tracked document relative to the docs folder."""
    def _write(rel_path: str, content: str) -> Path:
        path = store.docs_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
