"""
Skill registry for managing available skills.

The registry coordinates discovery and loading, and provides the
catalog-level queries: lookup, search, recommendation, statistics
and the cross-reference graph.
"""

from __future__ import annotations

import collections as _collections
import dataclasses as _dataclasses
import logging as _logging
import re as _re
import typing as _typing

import aetherskills.constants as constants
import aetherskills.skills.discovery as discovery
import aetherskills.skills.errors as errors
import aetherskills.skills.loader as loader
import aetherskills.skills.references as references
import aetherskills.skills.skill as skill_module
import aetherskills.skills.validation as validation

if _typing.TYPE_CHECKING:
    import aetherskills.skills.tokens as tokens

_logger = _logging.getLogger(__name__)

# Number of skills listed under "largest" in statistics
_LARGEST_COUNT = 5

_WORD_RE = _re.compile(r"[a-z0-9]+")

# Words that carry no topic when recommending skills
_STOPWORDS = frozenset(
    {
        "about", "after", "also", "before", "does", "from", "have", "into",
        "need", "needs", "only", "should", "some", "than", "that", "their",
        "them", "then", "there", "these", "they", "this", "those", "using",
        "what", "when", "where", "which", "while", "will", "with", "your",
    }
)


def _words(text: str) -> list[str]:
    """Lowercase alphanumeric words of text; hyphens separate words."""
    return _WORD_RE.findall(text.lower())


@_dataclasses.dataclass
class CatalogStats:
    """Aggregate numbers about a skill catalog."""

    total: int
    valid: int
    invalid: int
    total_body_lines: int
    largest: list[tuple[str, int]]
    section_coverage: dict[str, int]
    sources: dict[str, int]
    measured: int = 0
    over_soft_limit: list[str] = _dataclasses.field(default_factory=list)
    token_estimates: list[tokens.SkillTokenEstimate] | None = None

    @property
    def average_body_lines(self) -> float:
        if not self.measured:
            return 0.0
        return self.total_body_lines / self.measured

    @property
    def total_metadata_tokens(self) -> int | None:
        if self.token_estimates is None:
            return None
        return sum(e.metadata_tokens for e in self.token_estimates)

    @property
    def total_body_tokens(self) -> int | None:
        if self.token_estimates is None:
            return None
        return sum(e.body_tokens for e in self.token_estimates)

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, _typing.Any] = {
            "total": self.total,
            "valid": self.valid,
            "invalid": self.invalid,
            "total_body_lines": self.total_body_lines,
            "average_body_lines": round(self.average_body_lines, 1),
            "largest": [{"name": n, "body_lines": c} for n, c in self.largest],
            "over_soft_limit": self.over_soft_limit,
            "section_coverage": self.section_coverage,
            "sources": self.sources,
            "measured": self.measured,
        }
        if self.token_estimates is not None:
            data["tokens"] = {
                "metadata_total": self.total_metadata_tokens,
                "body_total": self.total_body_tokens,
                "skills": [e.to_dict() for e in self.token_estimates],
            }
        return data


class SkillRegistry:
    """
    Registry for managing skills.

    Handles:
    - Skill discovery from the configured locations (lazily, once)
    - Lookup, search and keyword recommendation
    - Catalog statistics and the reference graph
    """

    def __init__(
        self,
        skill_discovery: discovery.SkillDiscovery,
        validator: validation.SkillValidator | None = None,
    ) -> None:
        """
        Initialize the skill registry.

        Args:
            skill_discovery: Discovery configured with the search locations.
            validator: Validator used for statistics (defaults applied if None).
        """
        self._discovery = skill_discovery
        self._validator = validator or validation.SkillValidator()
        self._loader = loader.SkillLoader()
        self._skills: dict[str, skill_module.Skill] | None = None

    @property
    def discovery(self) -> discovery.SkillDiscovery:
        return self._discovery

    @property
    def loader(self) -> loader.SkillLoader:
        """The progressive-disclosure loader over discovered skills."""
        self._ensure_discovered()
        return self._loader

    def _ensure_discovered(self) -> dict[str, skill_module.Skill]:
        """Ensure skills have been discovered."""
        if self._skills is None:
            self._skills = self._discovery.discover()
            self._loader.set_skills(self._skills)
            _logger.debug("Discovered %d skill(s)", len(self._skills))
        return self._skills

    def discover(self) -> None:
        """Force re-discovery of skills."""
        self._skills = None
        self._ensure_discovered()

    # Lookup
    def list_skills(self) -> list[skill_module.Skill]:
        """List all discovered skills, sorted by name."""
        self._ensure_discovered()
        return self._loader.list_skills()

    def get_skill(self, name: str) -> skill_module.Skill | None:
        """Get a skill by name, or None if not found."""
        self._ensure_discovered()
        return self._loader.get_skill(name)

    def has_skill(self, name: str) -> bool:
        """Check if a skill exists."""
        return self.get_skill(name) is not None

    def require_skill(self, name: str) -> skill_module.Skill:
        """
        Get a skill by name.

        Raises:
            SkillNotFoundError: If no skill has this name.
        """
        skill = self.get_skill(name)
        if skill is None:
            raise errors.SkillNotFoundError(name, self._discovery.catalog_dir)
        return skill

    # Search
    def search(self, term: str) -> list[skill_module.Skill]:
        """
        Find skills whose name or SKILL.md content contains term.

        Matching is case-insensitive.

        Raises:
            ValueError: If term is empty.
        """
        needle = term.strip().lower()
        if not needle:
            raise ValueError("Please provide a search term")

        matches: list[skill_module.Skill] = []
        for skill in self.list_skills():
            if needle in skill.name.lower():
                matches.append(skill)
                continue
            try:
                content = skill.skill_file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                _logger.debug("Cannot read %s: %s", skill.skill_file, e)
                content = f"{skill.description}\n{skill.body}"
            if needle in content.lower():
                matches.append(skill)
        return matches

    def find_matching_skills(
        self,
        user_input: str,
        *,
        max_results: int = 3,
    ) -> list[skill_module.Skill]:
        """
        Find skills that might apply to a task description.

        Matching is on whole words. A skill scores when its name (with
        or without hyphens) or one of its tags appears in the input as
        a phrase, and for each description word found in the input.
        Short words, common English words and the words of the
        description prefix ("Use when") are not counted.

        Args:
            user_input: Task description.
            max_results: Maximum number of skills to return.

        Returns:
            Matching skills, best first.
        """
        skills = self._ensure_discovered()

        input_words = _words(user_input)
        input_phrase = f" {' '.join(input_words)} "
        ignored = _STOPWORDS | set(_words(self._validator.description_prefix))

        def _has_phrase(text: str) -> bool:
            words = _words(text)
            return bool(words) and f" {' '.join(words)} " in input_phrase

        matches: list[tuple[skill_module.Skill, int]] = []

        for skill in skills.values():
            score = 0

            if _has_phrase(skill.name):
                score += 10

            score += 3 * sum(1 for tag in skill.tags if _has_phrase(tag))

            desc_words = {
                w for w in _words(skill.description)
                if len(w) > 3 and w not in ignored
            }
            score += len(desc_words.intersection(input_words))

            if score > 0:
                matches.append((skill, score))

        matches.sort(key=lambda x: (-x[1], x[0].name))
        return [skill for skill, _ in matches[:max_results]]

    # Catalog-level views
    def reference_graph(self) -> references.ReferenceGraph:
        """Cross-reference graph of the discovered skills."""
        return references.ReferenceGraph.build(self.list_skills())

    def validate_catalog(self) -> list[validation.ValidationResult]:
        """
        Validate every directory in the catalog.

        Raises:
            SkillsDirectoryNotFoundError: If the catalog directory is missing.
        """
        catalog_dir = self._discovery.catalog_dir
        if catalog_dir is None:
            raise errors.SkillError("No skills directory configured")
        if not catalog_dir.is_dir():
            raise errors.SkillsDirectoryNotFoundError(catalog_dir)
        return self._validator.validate_catalog(catalog_dir)

    def stats(
        self,
        token_counter: tokens.SkillTokenCounter | None = None,
    ) -> CatalogStats:
        """
        Compute catalog statistics.

        When the catalog directory exists, every figure describes the
        skills loaded from it; skills that discovery found elsewhere
        (global or $AETHER_SKILLS_PATH locations) only show up in
        ``sources``. Without a catalog directory all discovered skills
        are measured.

        Args:
            token_counter: When given, token estimates are included.

        Returns:
            CatalogStats for the catalog directory.
        """
        skills = self.list_skills()

        catalog_dir = self._discovery.catalog_dir
        if catalog_dir is not None and catalog_dir.is_dir():
            results = self._validator.validate_catalog(catalog_dir)
            total = len(results)
            valid = sum(1 for r in results if r.valid)
            measured = [s for s in skills if s.source == discovery.SOURCE_CATALOG]
        else:
            total = len(skills)
            valid = len(skills)
            measured = skills

        line_counts = sorted(
            ((s.name, s.body_line_count) for s in measured),
            key=lambda x: (-x[1], x[0]),
        )

        coverage = {
            section: sum(1 for s in measured if s.has_section(section))
            for section in constants.STANDARD_SECTIONS
        }

        sources = dict(_collections.Counter(s.source for s in skills))

        estimates = None
        if token_counter is not None:
            estimates = [token_counter.estimate(s) for s in measured]

        return CatalogStats(
            total=total,
            valid=valid,
            invalid=total - valid,
            total_body_lines=sum(c for _, c in line_counts),
            largest=line_counts[:_LARGEST_COUNT],
            section_coverage=coverage,
            sources=sources,
            measured=len(measured),
            over_soft_limit=[
                s.name for s in measured
                if s.body_line_count > self._validator.body_soft_limit
            ],
            token_estimates=estimates,
        )

    # Serialization
    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        skills = self.list_skills()
        catalog_dir = self._discovery.catalog_dir
        return {
            "catalog_dir": str(catalog_dir) if catalog_dir else None,
            "search_paths": [str(p) for p in self._discovery.get_search_paths()],
            "skill_count": len(skills),
            "skills": [s.to_dict() for s in skills],
        }
