"""Exceptions raised by the skills catalog."""

from __future__ import annotations

import pathlib as _pathlib


class SkillError(Exception):
    """Base class for skill catalog errors."""

    pass


class SkillNotFoundError(SkillError, LookupError):
    """Raised when a skill name does not resolve to a skill."""

    def __init__(self, name: str, location: _pathlib.Path | None = None) -> None:
        self.name = name
        self.location = location
        if location is not None:
            super().__init__(f"Skill not found: {name} (in {location})")
        else:
            super().__init__(f"Skill not found: {name}")


class SkillsDirectoryNotFoundError(SkillError):
    """Raised when the catalog directory does not exist."""

    def __init__(self, path: _pathlib.Path) -> None:
        self.path = path
        super().__init__(f"Skills directory not found: {path}")


class SkillInstallError(SkillError):
    """Raised when a skill cannot be installed."""

    pass
