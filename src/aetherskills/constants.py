"""
Shared constants for aether-skills.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Skill layout
SKILL_FILE_NAME = "SKILL.md"
"""File that marks a directory as a skill."""

DEFAULT_CATALOG_DIR_NAME = "skills"
"""Catalog directory name under the project root."""

# Frontmatter limits
SKILL_NAME_MAX_LENGTH = 64
SKILL_DESCRIPTION_MAX_LENGTH = 1024

SKILL_NAME_PATTERN = r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$"
"""Lowercase, hyphenated, no leading or trailing hyphen."""

DEFAULT_DESCRIPTION_PREFIX = "Use when"
"""Descriptions are trigger conditions and start with this phrase."""

# Body limits
SKILL_BODY_SOFT_LIMIT = 500
"""Recommended maximum number of body lines."""

# Sections a well-formed skill document usually carries
STANDARD_SECTIONS = (
    "Overview",
    "When to Use",
    "Core Pattern",
    "Quick Reference",
    "Implementation",
    "Common Mistakes",
    "Real-World Impact",
)

DEFAULT_REQUIRED_SECTIONS = ("Overview", "When to Use")
"""Sections whose absence produces a validation warning."""

# Token estimation
DEFAULT_TOKENIZER_MODEL = "gpt-4"
"""Model name used to select a tiktoken encoding."""

# Environment
ENV_SKILL_PATH = "AETHER_SKILLS_PATH"
"""Colon-separated extra skill search paths."""
