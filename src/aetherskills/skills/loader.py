"""
Skill loader with progressive disclosure.

Serves catalog content to an assistant in three levels:
1. Metadata only (always in context) - name + description per skill
2. Full body (when the skill triggers)
3. Reference files and scripts (loaded on demand)
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import aetherskills.skills.skill as skill_module

_logger = _logging.getLogger(__name__)


class SkillLoader:
    """
    Loader for progressive skill content disclosure.

    Reference file contents are cached per skill after the first read.
    """

    def __init__(self, skills: dict[str, skill_module.Skill] | None = None) -> None:
        """
        Initialize the skill loader.

        Args:
            skills: Pre-loaded skills dict (name -> Skill).
        """
        self._skills = skills or {}
        self._loaded_refs: dict[str, dict[str, str]] = {}  # skill -> file -> content

    def set_skills(self, skills: dict[str, skill_module.Skill]) -> None:
        """Set the available skills."""
        self._skills = skills
        self._loaded_refs = {}

    def get_skill(self, name: str) -> skill_module.Skill | None:
        """Get a skill by name."""
        return self._skills.get(name)

    def list_skills(self) -> list[skill_module.Skill]:
        """List all available skills, sorted by name."""
        return sorted(self._skills.values(), key=lambda s: s.name)

    # Level 1: Metadata index
    def get_all_metadata(self) -> str:
        """
        Get metadata for all skills (Level 1).

        Returns:
            Markdown index of skill names and descriptions, or an
            empty string when there are no skills.
        """
        if not self._skills:
            return ""

        lines = ["## Available Skills", ""]
        for skill in self.list_skills():
            lines.append(f"- {skill.get_metadata_for_prompt()}")
        lines.append("")
        lines.append(
            "Each description says when the skill applies. Load a skill's full "
            "guidance before following it."
        )

        return "\n".join(lines)

    # Level 2: Full body when triggered
    def get_skill_body(self, name: str) -> str | None:
        """Get the full skill body, or None if not found."""
        skill = self._skills.get(name)
        if skill is None:
            return None
        return skill.get_full_content()

    def trigger_skill(self, name: str) -> str | None:
        """
        Get a skill's content wrapped for injection into a conversation.

        Args:
            name: Skill name.

        Returns:
            Skill body inside <skill> markers, or None if not found.
        """
        skill = self._skills.get(name)
        if skill is None:
            return None

        body = skill.get_full_content()
        return f"""<skill name="{name}">
{body}
</skill>"""

    # Level 3: Reference files on demand
    def get_reference_file(self, skill_name: str, filename: str) -> str | None:
        """
        Get a reference file from a skill (Level 3).

        Args:
            skill_name: Skill name.
            filename: Path relative to the skill directory
                (e.g., "examples.md" or "references/patterns.md").

        Returns:
            File content, or None if not found or outside the skill.
        """
        skill = self._skills.get(skill_name)
        if skill is None:
            return None

        cached = self._loaded_refs.get(skill_name, {})
        if filename in cached:
            return cached[filename]

        ref_path = (skill.path / filename).resolve()
        if not ref_path.is_relative_to(skill.path.resolve()):
            _logger.warning(
                "Refusing reference outside skill %s: %s", skill_name, filename
            )
            return None
        if not ref_path.is_file():
            return None

        try:
            content = ref_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _logger.debug("Cannot read %s: %s", ref_path, e)
            return None

        self._loaded_refs.setdefault(skill_name, {})[filename] = content
        return content

    def list_reference_files(self, skill_name: str) -> list[str]:
        """List reference file names for a skill."""
        skill = self._skills.get(skill_name)
        if skill is None:
            return []
        return [str(f.relative_to(skill.path)) for f in skill.list_reference_files()]

    def list_scripts(self, skill_name: str) -> list[str]:
        """List script file names for a skill."""
        skill = self._skills.get(skill_name)
        if skill is None:
            return []
        return [s.name for s in skill.list_scripts()]

    def get_script_path(self, skill_name: str, script_name: str) -> _pathlib.Path | None:
        """Get the path to a script in a skill, or None if not found."""
        skill = self._skills.get(skill_name)
        if skill is None:
            return None

        scripts_dir = skill.path / "scripts"
        script_path = scripts_dir / script_name
        if not script_path.resolve().is_relative_to(scripts_dir.resolve()):
            _logger.warning(
                "Refusing script outside skill %s: %s", skill_name, script_name
            )
            return None
        if script_path.is_file():
            return script_path
        return None

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "skill_count": len(self._skills),
            "skills": [s.to_dict() for s in self.list_skills()],
            "cached_refs": {
                name: list(files.keys())
                for name, files in self._loaded_refs.items()
            },
        }
