"""
aether-skills - skill catalog tooling for AI coding assistants.

Discovers, validates, searches and installs SKILL.md skill documents.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("aether-skills")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "Aether.go Contributors"

from aetherskills.config import Settings  # noqa: E402
from aetherskills.skills import Skill, SkillRegistry  # noqa: E402

__all__ = ["__version__", "__version_info__", "Settings", "Skill", "SkillRegistry"]
