"""
Skill catalog management.

A skill is a directory holding a SKILL.md file: YAML frontmatter
(`name`, `description`) followed by markdown guidance for an AI coding
assistant. This package discovers, validates, searches, indexes and
installs such directories.

Skill discovery locations (lowest to highest priority):
1. ~/.config/opencode/skill/ - Installed OpenCode skills (opt-in)
2. ~/.claude/skills/ - Installed Claude skills (opt-in)
3. $AETHER_SKILLS_PATH - Custom paths (colon-separated)
4. <project>/skills/ - The catalog
"""

from aetherskills.skills.discovery import (
    SkillDiscovery,
    get_catalog_path,
    get_claude_skills_path,
    get_opencode_skills_path,
    get_skill_search_paths,
)
from aetherskills.skills.errors import (
    SkillError,
    SkillInstallError,
    SkillNotFoundError,
    SkillsDirectoryNotFoundError,
)
from aetherskills.skills.installer import (
    InstallReport,
    SkillInstaller,
    resolve_install_target,
)
from aetherskills.skills.loader import SkillLoader
from aetherskills.skills.references import ReferenceGraph
from aetherskills.skills.registry import CatalogStats, SkillRegistry
from aetherskills.skills.skill import (
    SKILL_BODY_SOFT_LIMIT,
    Skill,
    SkillFrontmatter,
    load_skill,
    parse_skill_markdown,
    split_sections,
)
from aetherskills.skills.validation import (
    Severity,
    SkillValidator,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Core
    "Skill",
    "SkillFrontmatter",
    "SKILL_BODY_SOFT_LIMIT",
    # Parsing
    "load_skill",
    "parse_skill_markdown",
    "split_sections",
    # Validation
    "Severity",
    "SkillValidator",
    "ValidationIssue",
    "ValidationResult",
    # Discovery
    "SkillDiscovery",
    "get_catalog_path",
    "get_claude_skills_path",
    "get_opencode_skills_path",
    "get_skill_search_paths",
    # Loader, Registry, Graph
    "SkillLoader",
    "SkillRegistry",
    "CatalogStats",
    "ReferenceGraph",
    # Installation
    "InstallReport",
    "SkillInstaller",
    "resolve_install_target",
    # Errors
    "SkillError",
    "SkillInstallError",
    "SkillNotFoundError",
    "SkillsDirectoryNotFoundError",
]
