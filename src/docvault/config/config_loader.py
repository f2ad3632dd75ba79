"""
Configuration loader for docvault projects.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.exceptions import ConfigError


logger = logging.getLogger(__name__)

CONFIG_DIR = ".docvault"
CONFIG_FILE = "config.yaml"
DEFAULT_DOCS_DIR = "docs"
DEFAULT_HISTORY_DIR = ".history"


def get_config_dir(project_root: Path) -> Path:
    """Return the per-project configuration directory."""
    return Path(project_root) / CONFIG_DIR


def is_initialized(project_root: Path) -> bool:
    """Check whether a project has been initialized."""
    return (get_config_dir(project_root) / CONFIG_FILE).exists()


class ProjectConfig:
    """
    Configuration for a single docvault project.

    Loads ``<project_root>/.docvault/config.yaml`` when present, otherwise
    falls back to defaults. Environment overrides are applied last.
    """

    def __init__(self, project_root: Path, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            project_root: Root directory of the project
            config_path: Path to YAML config file (default: inside .docvault/)
        """
        self.project_root = Path(project_root).resolve()
        self.config_path = Path(config_path) if config_path else (
            get_config_dir(self.project_root) / CONFIG_FILE
        )
        self.config = self._load_config() if self.config_path.exists() else self._default_config()
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file and merge over the defaults."""
        logger.debug(f"Loading config from: {self.config_path}")

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {self.config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")

        config = self._default_config()
        for key, value in loaded.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value
        return config

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "docs_path": f"{CONFIG_DIR}/{DEFAULT_DOCS_DIR}",
            "history_path": f"{CONFIG_DIR}/{DEFAULT_HISTORY_DIR}",
            "extension": ".md",
            "track_git": True,
            "diff": {
                "context_lines": 3,
            },
            "history": {
                "compact_threshold": 5,
            },
            "created_at": None,
        }

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        docs_dir = os.environ.get("DOCVAULT_DOCS_DIR")
        if docs_dir:
            self.config["docs_path"] = docs_dir

        history_dir = os.environ.get("DOCVAULT_HISTORY_DIR")
        if history_dir:
            self.config["history_path"] = history_dir

        track_git = os.environ.get("DOCVAULT_TRACK_GIT")
        if track_git:
            self.config["track_git"] = track_git.strip().lower() not in ("0", "false", "no", "off")

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        if path.is_absolute():
            return path
        return self.project_root / path

    @property
    def docs_dir(self) -> Path:
        """Tracked directory holding the live documents."""
        return self._resolve(self.config["docs_path"])

    @property
    def history_dir(self) -> Path:
        """Directory holding one storage location per snapshot."""
        return self._resolve(self.config["history_path"])

    @property
    def extension(self) -> str:
        ext = self.config.get("extension") or ".md"
        return ext if ext.startswith(".") else f".{ext}"

    @property
    def track_git(self) -> bool:
        return bool(self.config.get("track_git", True))

    @property
    def context_lines(self) -> int:
        return int(self.get("diff.context_lines", 3))

    @property
    def compact_threshold(self) -> int:
        return int(self.get("history.compact_threshold", 5))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def save(self) -> None:
        """Write the configuration back to its YAML file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.config, f, default_flow_style=False, sort_keys=False)
        logger.info(f"Saved config to: {self.config_path}")


def init_project(
    project_root: Path,
    docs_path: Optional[str] = None,
    track_git: bool = True,
) -> ProjectConfig:
    """
    Initialize a project: write the config file and create its directories.

    The default docs folder is created; a custom docs_path is assumed to
    exist already (or to be created by the user).
    """
    config = ProjectConfig(project_root)
    if docs_path:
        config.config["docs_path"] = docs_path
    config.config["track_git"] = track_git
    config.config["created_at"] = datetime.now(timezone.utc).isoformat()

    config.history_dir.mkdir(parents=True, exist_ok=True)
    if not docs_path:
        config.docs_dir.mkdir(parents=True, exist_ok=True)

    config.save()
    logger.info(f"Initialized project at {config.project_root}")
    return config
