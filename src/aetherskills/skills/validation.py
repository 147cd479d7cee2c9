"""
Format checks for skill directories.

Each check produces a ValidationIssue with a stable code. Errors make
a skill invalid; warnings are advisory unless strict mode is on.
Validation reports problems instead of raising them, so a whole
catalog can be checked in one pass.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import logging as _logging
import pathlib as _pathlib
import re as _re
import typing as _typing

import pydantic as _pydantic

import aetherskills.constants as constants
import aetherskills.skills.references as references
import aetherskills.skills.skill as skill_module

_logger = _logging.getLogger(__name__)

_NAME_RE = _re.compile(constants.SKILL_NAME_PATTERN)

# Rule codes that already cover a frontmatter field
_FIELD_CODES = {
    "name": ("missing-name", "invalid-name"),
    "description": ("missing-description", "description-length"),
}


class Severity(str, _enum.Enum):
    """How serious a validation issue is."""

    ERROR = "error"
    WARNING = "warning"


@_dataclasses.dataclass(frozen=True)
class ValidationIssue:
    """A single problem found in a skill directory."""

    code: str
    severity: Severity
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
        }


@_dataclasses.dataclass
class ValidationResult:
    """Outcome of validating one skill directory."""

    path: _pathlib.Path
    name: str | None = None
    issues: list[ValidationIssue] = _dataclasses.field(default_factory=list)

    @property
    def directory_name(self) -> str:
        """Name of the validated directory."""
        return self.path.name

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    @property
    def valid(self) -> bool:
        """True when no errors were found (warnings allowed)."""
        return not self.errors

    def passed(self, strict: bool = False) -> bool:
        """Whether the skill passes; strict mode also fails on warnings."""
        if strict:
            return not self.issues
        return self.valid

    def has_issue(self, code: str) -> bool:
        """Whether an issue with this code was reported."""
        return any(i.code == code for i in self.issues)

    def add(self, code: str, severity: Severity, message: str) -> None:
        self.issues.append(ValidationIssue(code, severity, message))

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": str(self.path),
            "directory": self.directory_name,
            "name": self.name,
            "valid": self.valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
        }


class SkillValidator:
    """
    Validates skill directories against the SKILL.md format.

    The checks cover the frontmatter contract (name, description and
    its "Use when" prefix, directory/name agreement) and softer content
    guidance (body length, recommended sections, relative links to
    sibling skills).
    """

    def __init__(
        self,
        *,
        description_prefix: str = constants.DEFAULT_DESCRIPTION_PREFIX,
        body_soft_limit: int = constants.SKILL_BODY_SOFT_LIMIT,
        required_sections: _typing.Sequence[str] = constants.DEFAULT_REQUIRED_SECTIONS,
    ) -> None:
        """
        Initialize the validator.

        Args:
            description_prefix: Text every description must start with.
                An empty string disables the check.
            body_soft_limit: Body line count above which a warning is raised.
            required_sections: Level-2 headings whose absence is a warning.
        """
        self.description_prefix = description_prefix
        self.body_soft_limit = body_soft_limit
        self.required_sections = tuple(required_sections)

    def validate_dir(
        self,
        skill_dir: _pathlib.Path,
        known_names: _typing.Collection[str] | None = None,
    ) -> ValidationResult:
        """
        Validate a single skill directory.

        Args:
            skill_dir: Directory expected to contain SKILL.md.
            known_names: Skill names in the surrounding catalog. When
                given, relative links to unknown skills are reported.

        Returns:
            ValidationResult listing every issue found.
        """
        result = ValidationResult(path=skill_dir)
        skill_file = skill_dir / constants.SKILL_FILE_NAME

        if not skill_file.is_file():
            result.add("missing-skill-file", Severity.ERROR, "SKILL.md not found")
            return result

        try:
            content = skill_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            result.add("unreadable", Severity.ERROR, f"Cannot read SKILL.md: {e}")
            return result

        return self.validate_content(content, skill_dir, known_names, result=result)

    def validate_content(
        self,
        content: str,
        skill_dir: _pathlib.Path,
        known_names: _typing.Collection[str] | None = None,
        *,
        result: ValidationResult | None = None,
    ) -> ValidationResult:
        """Validate raw SKILL.md content as if it lived in skill_dir."""
        if result is None:
            result = ValidationResult(path=skill_dir)

        parts = skill_module.split_frontmatter(content)
        if parts is None:
            result.add(
                "missing-frontmatter",
                Severity.ERROR,
                "YAML frontmatter not found",
            )
            return result

        frontmatter_yaml, body = parts
        try:
            data = skill_module.load_frontmatter_data(frontmatter_yaml)
        except ValueError as e:
            result.add("invalid-yaml", Severity.ERROR, str(e))
            return result

        self._check_name(data, skill_dir, result)
        self._check_description(data, result)
        self._check_frontmatter_model(data, result)
        self._check_body(body, result)

        if known_names is not None:
            for target in references.extract_links(body):
                if target not in known_names:
                    result.add(
                        "unknown-reference",
                        Severity.WARNING,
                        f"Link to unknown skill '{target}'",
                    )

        return result

    def _check_name(
        self,
        data: dict[str, _typing.Any],
        skill_dir: _pathlib.Path,
        result: ValidationResult,
    ) -> None:
        raw = data.get("name")
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            result.add("missing-name", Severity.ERROR, "'name' field not found in frontmatter")
            return

        name = str(raw).strip()
        result.name = name

        if len(name) > constants.SKILL_NAME_MAX_LENGTH or not _NAME_RE.match(name):
            result.add(
                "invalid-name",
                Severity.ERROR,
                f"name '{name}' must be lowercase letters, digits and hyphens "
                f"(max {constants.SKILL_NAME_MAX_LENGTH} characters)",
            )

        if name != skill_dir.name:
            result.add(
                "name-mismatch",
                Severity.ERROR,
                f"directory '{skill_dir.name}' does not match name '{name}'",
            )

    def _check_description(
        self,
        data: dict[str, _typing.Any],
        result: ValidationResult,
    ) -> None:
        raw = data.get("description")
        if raw is None or not str(raw).strip():
            result.add(
                "missing-description",
                Severity.ERROR,
                "'description' field not found in frontmatter",
            )
            return

        description = str(raw).strip()

        if self.description_prefix and not description.startswith(self.description_prefix):
            result.add(
                "description-prefix",
                Severity.ERROR,
                f"description must start with '{self.description_prefix}'",
            )

        if len(description) > constants.SKILL_DESCRIPTION_MAX_LENGTH:
            result.add(
                "description-length",
                Severity.ERROR,
                f"description is {len(description)} characters "
                f"(max {constants.SKILL_DESCRIPTION_MAX_LENGTH})",
            )

    def _check_frontmatter_model(
        self,
        data: dict[str, _typing.Any],
        result: ValidationResult,
    ) -> None:
        """
        Check the frontmatter against the model load_skill parses it with.

        A skill that passes here can be loaded by discovery. Fields that
        an earlier rule already reported on are not reported twice.
        """
        try:
            skill_module.SkillFrontmatter.model_validate(data)
        except _pydantic.ValidationError as e:
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "frontmatter"
                if any(result.has_issue(c) for c in _FIELD_CODES.get(field, ())):
                    continue
                result.add(
                    "invalid-frontmatter",
                    Severity.ERROR,
                    f"frontmatter field '{field}': {err['msg']}",
                )

    def _check_body(self, body: str, result: ValidationResult) -> None:
        if not body:
            result.add("empty-body", Severity.WARNING, "SKILL.md has no content after frontmatter")
            return

        line_count = len(body.splitlines())
        if line_count > self.body_soft_limit:
            result.add(
                "body-length",
                Severity.WARNING,
                f"Body exceeds recommended limit ({line_count} > {self.body_soft_limit} lines)",
            )

        titles = {t.lower() for t in skill_module.split_sections(body) if t}
        for section in self.required_sections:
            if section.lower() not in titles:
                result.add(
                    "missing-section",
                    Severity.WARNING,
                    f"Recommended section '## {section}' not found",
                )

    def validate_catalog(self, root: _pathlib.Path) -> list[ValidationResult]:
        """
        Validate every skill directory directly under root.

        Hidden directories are skipped. Directories without SKILL.md
        are reported as invalid.

        Args:
            root: Catalog directory.

        Returns:
            Results sorted by directory name.
        """
        skill_dirs = [
            d for d in sorted(root.iterdir())
            if d.is_dir() and not d.name.startswith(".")
        ]
        known = {d.name for d in skill_dirs if (d / constants.SKILL_FILE_NAME).is_file()}

        results = []
        for skill_dir in skill_dirs:
            res = self.validate_dir(skill_dir, known_names=known)
            _logger.debug(
                "Validated %s: %d error(s), %d warning(s)",
                skill_dir.name,
                len(res.errors),
                len(res.warnings),
            )
            results.append(res)
        return results
