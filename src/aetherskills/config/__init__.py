"""
Configuration module for aether-skills.

Uses pydantic-settings for environment variable loading.
"""

from aetherskills.config.settings import (
    Settings,
    ValidationConfig,
    find_git_root,
    find_project_root,
)
from aetherskills.config.sources import ConfigFileError

__all__ = [
    "ConfigFileError",
    "Settings",
    "ValidationConfig",
    "find_git_root",
    "find_project_root",
]
