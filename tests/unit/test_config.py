"""
Unit tests for project configuration.
"""

import pytest
import yaml

from docvault.config.config_loader import (
    CONFIG_DIR,
    CONFIG_FILE,
    ProjectConfig,
    init_project,
    is_initialized,
)
from docvault.core.exceptions import ConfigError


class TestProjectConfig:
    """Tests for ProjectConfig."""

    def test_defaults_without_file(self, tmp_path):
        config = ProjectConfig(tmp_path)

        assert config.docs_dir == tmp_path.resolve() / ".docvault" / "docs"
        assert config.history_dir == tmp_path.resolve() / ".docvault" / ".history"
        assert config.extension == ".md"
        assert config.track_git is True
        assert config.context_lines == 3
        assert config.compact_threshold == 5

    def test_yaml_values_merge_over_defaults(self, tmp_path):
        config_dir = tmp_path / CONFIG_DIR
        config_dir.mkdir()
        (config_dir / CONFIG_FILE).write_text(
            "docs_path: notes\n"
            "extension: txt\n"
            "diff:\n"
            "  context_lines: 1\n",
            encoding="utf-8",
        )

        config = ProjectConfig(tmp_path)

        assert config.docs_dir == tmp_path.resolve() / "notes"
        assert config.extension == ".txt"
        assert config.context_lines == 1
        assert config.compact_threshold == 5

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("", encoding="utf-8")

        config = ProjectConfig(tmp_path, config_path=config_file)

        assert config.extension == ".md"

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("docs_path: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            ProjectConfig(tmp_path, config_path=config_file)

    def test_non_mapping(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            ProjectConfig(tmp_path, config_path=config_file)

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOCVAULT_DOCS_DIR", "elsewhere")
        monkeypatch.setenv("DOCVAULT_HISTORY_DIR", "/var/tmp/history")
        monkeypatch.setenv("DOCVAULT_TRACK_GIT", "false")

        config = ProjectConfig(tmp_path)

        assert config.docs_dir == tmp_path.resolve() / "elsewhere"
        assert str(config.history_dir) == "/var/tmp/history"
        assert config.track_git is False

    def test_dotted_get(self, tmp_path):
        config = ProjectConfig(tmp_path)

        assert config.get("diff.context_lines") == 3
        assert config.get("diff.missing", "x") == "x"
        assert config.get("extension.deeper", "y") == "y"


class TestInitProject:
    """Tests for init_project."""

    def test_creates_layout(self, tmp_path):
        config = init_project(tmp_path, track_git=False)

        assert is_initialized(tmp_path)
        assert config.docs_dir.is_dir()
        assert config.history_dir.is_dir()

        saved = yaml.safe_load((tmp_path / CONFIG_DIR / CONFIG_FILE).read_text())
        assert saved["track_git"] is False
        assert saved["created_at"]

    def test_custom_docs_path_is_not_created(self, tmp_path):
        config = init_project(tmp_path, docs_path="docs")

        assert not config.docs_dir.exists()
        assert ProjectConfig(tmp_path).docs_dir == tmp_path.resolve() / "docs"

    def test_not_initialized(self, tmp_path):
        assert not is_initialized(tmp_path)
