"""
Skill definition and SKILL.md parsing.

Skills are defined by a SKILL.md file with YAML frontmatter.
The frontmatter contains metadata; the body contains the prose
guidance (Overview, When to Use, Core Pattern, ...).
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import re as _re
import typing as _typing

import pydantic as _pydantic
import yaml as _yaml

import aetherskills.constants as constants

_logger = _logging.getLogger(__name__)

# Kept as a module attribute for callers that import it from here
SKILL_BODY_SOFT_LIMIT = constants.SKILL_BODY_SOFT_LIMIT

# Regex to extract YAML frontmatter from markdown
_FRONTMATTER_RE = _re.compile(
    r"^---\s*\n(.*?)\n---\s*\n?(.*)$",
    _re.DOTALL,
)

_SECTION_HEADING_RE = _re.compile(r"^##\s+(.+?)\s*#*\s*$")
_FENCE_RE = _re.compile(r"^\s*(```|~~~)")


class SkillFrontmatter(_pydantic.BaseModel):
    """
    Frontmatter parsed from a SKILL.md file.

    Required fields:
    - name: Skill identifier (must match directory name)
    - description: Trigger condition, conventionally "Use when ..."

    Unknown keys are preserved.
    """

    model_config = _pydantic.ConfigDict(
        extra="allow",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    # Required fields
    name: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=constants.SKILL_NAME_MAX_LENGTH,
        pattern=constants.SKILL_NAME_PATTERN,
        description="Skill name (lowercase, hyphens allowed)",
    )

    description: str = _pydantic.Field(
        ...,
        min_length=1,
        max_length=constants.SKILL_DESCRIPTION_MAX_LENGTH,
        description="When the skill applies",
    )

    # Optional fields
    license: str | None = _pydantic.Field(
        default=None,
        description="License for the skill",
    )

    version: str | None = _pydantic.Field(
        default=None,
        description="Document version",
    )

    tags: list[str] = _pydantic.Field(
        default_factory=list,
        description="Free-form classification tags",
    )

    allowed_tools: list[str] = _pydantic.Field(
        default_factory=list,
        alias="allowed-tools",
        description="Tools pre-approved for use with this skill",
    )

    metadata: dict[str, _typing.Any] = _pydantic.Field(
        default_factory=dict,
        description="Custom metadata for client-specific data",
    )

    @_pydantic.field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: _typing.Any) -> _typing.Any:
        # YAML reads `version: 1.0` as a float
        if isinstance(value, int | float):
            return str(value)
        return value


def split_sections(body: str) -> dict[str, str]:
    """
    Split a markdown body into level-2 sections.

    Text before the first ``## `` heading is stored under the empty
    title. Headings inside fenced code blocks are ignored, and when a
    title repeats only the first section is kept.

    Args:
        body: Markdown body (no frontmatter).

    Returns:
        Ordered mapping of heading title to section text.
    """
    sections: dict[str, str] = {}
    title = ""
    lines: list[str] = []
    in_fence = False

    def _flush() -> None:
        text = "\n".join(lines).strip()
        if title not in sections and (title or text):
            sections[title] = text

    for line in body.splitlines():
        if _FENCE_RE.match(line):
            in_fence = not in_fence
        elif not in_fence:
            match = _SECTION_HEADING_RE.match(line)
            if match:
                _flush()
                title = match.group(1)
                lines = []
                continue
        lines.append(line)

    _flush()
    return sections


@_dataclasses.dataclass
class Skill:
    """
    A parsed skill document.

    The body is treated as opaque markdown; nothing in it is executed.
    """

    frontmatter: SkillFrontmatter
    """Parsed frontmatter metadata."""

    body: str
    """Markdown body after the frontmatter."""

    path: _pathlib.Path
    """Path to skill directory."""

    source: str = "catalog"
    """Where the skill was discovered from."""

    @property
    def name(self) -> str:
        """Skill name from frontmatter."""
        return self.frontmatter.name

    @property
    def description(self) -> str:
        """Skill description from frontmatter."""
        return self.frontmatter.description

    @property
    def license(self) -> str | None:
        """Skill license from frontmatter."""
        return self.frontmatter.license

    @property
    def tags(self) -> list[str]:
        """Classification tags from frontmatter."""
        return self.frontmatter.tags

    @property
    def skill_file(self) -> _pathlib.Path:
        """Path to the SKILL.md file."""
        return self.path / constants.SKILL_FILE_NAME

    @property
    def body_line_count(self) -> int:
        """Number of lines in the skill body."""
        return len(self.body.splitlines())

    @property
    def exceeds_soft_limit(self) -> bool:
        """Whether body exceeds the soft limit."""
        return self.body_line_count > SKILL_BODY_SOFT_LIMIT

    @property
    def sections(self) -> dict[str, str]:
        """Level-2 sections of the body, keyed by heading title."""
        return split_sections(self.body)

    @property
    def section_titles(self) -> list[str]:
        """Titles of the level-2 headings, in order."""
        return [title for title in self.sections if title]

    def has_section(self, title: str) -> bool:
        """Whether the body has a level-2 heading with this title (case-insensitive)."""
        wanted = title.strip().lower()
        return any(t.lower() == wanted for t in self.section_titles)

    def list_reference_files(self) -> list[_pathlib.Path]:
        """
        List reference files shipped alongside SKILL.md.

        Returns files in references/ plus any top-level .md files
        other than SKILL.md, sorted by name.
        """
        refs: list[_pathlib.Path] = []

        refs_dir = self.path / "references"
        if refs_dir.is_dir():
            for ref_file in sorted(refs_dir.iterdir()):
                if ref_file.is_file() and not ref_file.name.startswith("."):
                    refs.append(ref_file)

        if self.path.is_dir():
            for md_file in sorted(self.path.glob("*.md")):
                if md_file.name != constants.SKILL_FILE_NAME:
                    refs.append(md_file)

        return refs

    def list_scripts(self) -> list[_pathlib.Path]:
        """List files in the skill's scripts/ directory."""
        scripts: list[_pathlib.Path] = []
        scripts_dir = self.path / "scripts"
        if scripts_dir.is_dir():
            for script in sorted(scripts_dir.iterdir()):
                if script.is_file() and not script.name.startswith("."):
                    scripts.append(script)
        return scripts

    def get_metadata_for_prompt(self) -> str:
        """Name and description only, for an assistant's skill index."""
        return f"**{self.name}**: {self.description}"

    def get_full_content(self) -> str:
        """The complete SKILL.md body."""
        return self.body

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "path": str(self.path),
            "source": self.source,
            "license": self.license,
            "version": self.frontmatter.version,
            "tags": self.tags,
            "body_lines": self.body_line_count,
            "exceeds_limit": self.exceeds_soft_limit,
            "sections": self.section_titles,
            "reference_files": [str(f) for f in self.list_reference_files()],
            "scripts": [str(s) for s in self.list_scripts()],
        }


def split_frontmatter(content: str) -> tuple[str, str] | None:
    """
    Split raw SKILL.md content into (frontmatter_yaml, body).

    Returns None when the content has no ``---`` delimited block.
    """
    match = _FRONTMATTER_RE.match(content.lstrip("\ufeff"))
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def load_frontmatter_data(frontmatter_yaml: str) -> dict[str, _typing.Any]:
    """
    Load frontmatter YAML into a mapping.

    Raises:
        ValueError: If the YAML is malformed or not a mapping.
    """
    try:
        data = _yaml.safe_load(frontmatter_yaml)
    except _yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in frontmatter: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid YAML in frontmatter: expected a mapping, got {type(data).__name__}"
        )
    return data


def parse_skill_markdown(content: str) -> tuple[SkillFrontmatter, str]:
    """
    Parse a SKILL.md file into frontmatter and body.

    Args:
        content: Raw markdown content.

    Returns:
        Tuple of (frontmatter, body).

    Raises:
        ValueError: If frontmatter is missing or invalid.
    """
    parts = split_frontmatter(content)
    if parts is None:
        raise ValueError("SKILL.md must have YAML frontmatter (---)")

    frontmatter_yaml, body = parts
    data = load_frontmatter_data(frontmatter_yaml)

    try:
        frontmatter = SkillFrontmatter.model_validate(data)
    except _pydantic.ValidationError as e:
        raise ValueError(f"Invalid skill frontmatter: {e}") from e

    return frontmatter, body


def load_skill(
    skill_dir: _pathlib.Path,
    source: str = "catalog",
) -> Skill:
    """
    Load a skill from a directory.

    Args:
        skill_dir: Path to skill directory (must contain SKILL.md).
        source: Where the skill was discovered from.

    Returns:
        Parsed Skill instance.

    Raises:
        FileNotFoundError: If SKILL.md doesn't exist.
        ValueError: If SKILL.md is invalid.
    """
    skill_file = skill_dir / constants.SKILL_FILE_NAME
    if not skill_file.is_file():
        raise FileNotFoundError(f"SKILL.md not found: {skill_file}")

    try:
        content = skill_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"SKILL.md is not valid UTF-8: {skill_file}") from e

    frontmatter, body = parse_skill_markdown(content)

    line_count = len(body.splitlines())
    if line_count > SKILL_BODY_SOFT_LIMIT:
        _logger.warning(
            "Skill %s exceeds recommended body limit (%d lines > %d)",
            frontmatter.name,
            line_count,
            SKILL_BODY_SOFT_LIMIT,
        )

    return Skill(
        frontmatter=frontmatter,
        body=body,
        path=skill_dir.resolve(),
        source=source,
    )
