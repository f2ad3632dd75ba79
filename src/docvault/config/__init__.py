"""
Project configuration.
"""

from .config_loader import ProjectConfig, init_project, is_initialized, get_config_dir

__all__ = [
    "ProjectConfig",
    "init_project",
    "is_initialized",
    "get_config_dir",
]
