"""
Skill discovery from standard locations.

Skills are discovered from (lowest to highest priority):
1. ~/.config/opencode/skill/ - Installed OpenCode skills (global)
2. ~/.claude/skills/ - Installed Claude skills (global)
3. $AETHER_SKILLS_PATH - Custom paths (colon-separated)
4. <project>/skills/ - The catalog being worked on

Global locations are only scanned when asked for. Later sources
override earlier ones by skill name.
"""

from __future__ import annotations

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import aetherskills.constants as constants
import aetherskills.skills.skill as skill_module

_logger = _logging.getLogger(__name__)

SOURCE_GLOBAL_OPENCODE = "global-opencode"
SOURCE_GLOBAL_CLAUDE = "global-claude"
SOURCE_CUSTOM = "custom"
SOURCE_CATALOG = "catalog"


def get_claude_skills_path() -> _pathlib.Path:
    """Get the path to the global Claude skills directory."""
    return _pathlib.Path.home() / ".claude" / "skills"


def get_opencode_skills_path() -> _pathlib.Path:
    """Get the path to the global OpenCode skills directory."""
    return _pathlib.Path.home() / ".config" / "opencode" / "skill"


def get_catalog_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to the project's skill catalog."""
    return project_root / constants.DEFAULT_CATALOG_DIR_NAME


def get_env_skill_paths() -> list[_pathlib.Path]:
    """Paths listed in $AETHER_SKILLS_PATH."""
    paths: list[_pathlib.Path] = []
    env_path = _os.environ.get(constants.ENV_SKILL_PATH, "")
    for p in env_path.split(":"):
        p = p.strip()
        if p:
            paths.append(_pathlib.Path(p).expanduser().resolve())
    return paths


def get_skill_search_paths(
    catalog_dir: _pathlib.Path | None = None,
    *,
    include_global: bool = False,
    claude_dir: _pathlib.Path | None = None,
    opencode_dir: _pathlib.Path | None = None,
) -> list[_pathlib.Path]:
    """
    Get all skill search paths in priority order.

    Args:
        catalog_dir: The catalog directory (highest priority).
        include_global: Whether to scan installed global skills.
        claude_dir: Override for the Claude skills directory.
        opencode_dir: Override for the OpenCode skills directory.

    Returns:
        List of paths to search (lowest to highest priority).
    """
    paths: list[_pathlib.Path] = []

    if include_global:
        paths.append(opencode_dir or get_opencode_skills_path())
        paths.append(claude_dir or get_claude_skills_path())

    paths.extend(get_env_skill_paths())

    if catalog_dir is not None:
        paths.append(catalog_dir)

    return paths


class SkillDiscovery:
    """
    Discovers skills from standard locations.

    Scans skill directories and returns discovered Skill instances.
    Skills with the same name from later sources replace earlier ones.
    """

    def __init__(
        self,
        catalog_dir: _pathlib.Path | None = None,
        search_paths: list[_pathlib.Path] | None = None,
        *,
        include_global: bool = False,
        claude_dir: _pathlib.Path | None = None,
        opencode_dir: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize skill discovery.

        Args:
            catalog_dir: Catalog directory to scan.
            search_paths: Custom search paths (overrides default locations).
            include_global: Also scan installed global skills.
            claude_dir: Override for the Claude skills directory.
            opencode_dir: Override for the OpenCode skills directory.
        """
        self._catalog_dir = catalog_dir
        self._search_paths = search_paths
        self._include_global = include_global
        self._claude_dir = claude_dir or get_claude_skills_path()
        self._opencode_dir = opencode_dir or get_opencode_skills_path()

    @property
    def catalog_dir(self) -> _pathlib.Path | None:
        return self._catalog_dir

    def get_search_paths(self) -> list[_pathlib.Path]:
        """Get the search paths in use."""
        if self._search_paths is not None:
            return self._search_paths
        return get_skill_search_paths(
            self._catalog_dir,
            include_global=self._include_global,
            claude_dir=self._claude_dir,
            opencode_dir=self._opencode_dir,
        )

    def _get_source_for_path(self, search_path: _pathlib.Path) -> str:
        """Determine the source label for a search path."""
        if search_path == self._opencode_dir:
            return SOURCE_GLOBAL_OPENCODE
        if search_path == self._claude_dir:
            return SOURCE_GLOBAL_CLAUDE
        if self._catalog_dir is not None and search_path == self._catalog_dir:
            return SOURCE_CATALOG
        return SOURCE_CUSTOM

    def _iter_skill_dirs(
        self,
    ) -> _typing.Iterator[tuple[_pathlib.Path, str]]:
        for search_path in self.get_search_paths():
            if not search_path.is_dir():
                continue

            source = self._get_source_for_path(search_path)

            for skill_dir in sorted(search_path.iterdir()):
                if not skill_dir.is_dir() or skill_dir.name.startswith("."):
                    continue
                if not (skill_dir / constants.SKILL_FILE_NAME).is_file():
                    continue
                yield skill_dir, source

    def discover(self) -> dict[str, skill_module.Skill]:
        """
        Discover all skills from search paths.

        Later sources override earlier sources (by skill name).
        Invalid skills are skipped.

        Returns:
            Dict mapping skill name to Skill instance.
        """
        skills: dict[str, skill_module.Skill] = {}

        for skill_dir, source in self._iter_skill_dirs():
            try:
                skill = skill_module.load_skill(skill_dir, source=source)
            except (FileNotFoundError, ValueError) as e:
                _logger.debug("Skipping invalid skill %s: %s", skill_dir, e)
                continue
            if skill.name in skills:
                _logger.debug(
                    "Skill %s from %s overrides %s",
                    skill.name,
                    source,
                    skills[skill.name].source,
                )
            skills[skill.name] = skill

        return skills

    def discover_all(
        self,
        *,
        include_errors: bool = False,
    ) -> _typing.Iterator[
        skill_module.Skill | tuple[_pathlib.Path, Exception]
    ]:
        """
        Discover all skills, optionally including errors.

        Yields skills as they're discovered, and optionally
        (path, exception) tuples for invalid skills.

        Args:
            include_errors: If True, yield (path, exception) for failures.

        Yields:
            Skill instances, or (path, exception) tuples if include_errors.
        """
        for skill_dir, source in self._iter_skill_dirs():
            try:
                yield skill_module.load_skill(skill_dir, source=source)
            except (FileNotFoundError, ValueError) as e:
                if include_errors:
                    yield (skill_dir, e)
