"""
Shared pytest fixtures for aether-skills tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "AETHER_SKILLS_PATH",
    "AETHER_SKILLS_SKILLS_DIR",
    "AETHER_SKILLS_INCLUDE_GLOBAL",
    "AETHER_SKILLS_INSTALL_TARGET",
    "AETHER_SKILLS_VERBOSE",
    "AETHER_SKILLS_LOG_LEVEL",
    "AETHER_SKILLS_CONFIG_DIR",
]

STANDARD_BODY = """# {title}

## Overview

{title} in one paragraph.

## When to Use

- When the task calls for {title}.

## Common Mistakes

- Skipping the checklist.
"""

WriteSkill = _typing.Callable[..., _pathlib.Path]


def render_skill(
    name: str,
    description: str | None = None,
    body: str | None = None,
    extra_frontmatter: str = "",
) -> str:
    """Render SKILL.md content with standard sections."""
    if description is None:
        description = f"Use when working on {name.replace('-', ' ')}"
    if body is None:
        body = STANDARD_BODY.format(title=name)
    return f"---\nname: {name}\ndescription: {description}\n{extra_frontmatter}---\n\n{body}"


@_pytest.fixture
def write_skill() -> WriteSkill:
    """
    Factory that writes a skill directory.

    Usage:
        def test_x(write_skill, tmp_path):
            write_skill(tmp_path / "skills", "tdd-workflow")
            write_skill(tmp_path / "skills", "odd", content="no frontmatter")
    """

    def _write(
        parent: _pathlib.Path,
        name: str,
        description: str | None = None,
        body: str | None = None,
        *,
        content: str | None = None,
        extra_frontmatter: str = "",
    ) -> _pathlib.Path:
        skill_dir = parent / name
        skill_dir.mkdir(parents=True, exist_ok=True)
        if content is None:
            content = render_skill(name, description, body, extra_frontmatter)
        (skill_dir / "SKILL.md").write_text(content, encoding="utf-8")
        return skill_dir

    return _write


@_pytest.fixture
def catalog(tmp_path: _pathlib.Path, write_skill: WriteSkill) -> _pathlib.Path:
    """
    A small catalog with cross-references and one invalid skill.

    Layout:
        skills/
          bdd-scenario-writer/   references spec-parser
          spec-parser/           links to ../bdd-scenario-writer/SKILL.md
          contract-testing/      no references
          broken-skill/          description lacks "Use when"
    """
    root = tmp_path / "skills"
    root.mkdir()

    write_skill(
        root,
        "bdd-scenario-writer",
        "Use when turning acceptance criteria into Gherkin scenarios",
        STANDARD_BODY.format(title="BDD") + "\nRun after spec-parser has produced requirements.\n",
    )
    write_skill(
        root,
        "spec-parser",
        "Use when extracting requirements from a specification",
        STANDARD_BODY.format(title="Spec parsing")
        + "\nOutput feeds into [the BDD writer](../bdd-scenario-writer/SKILL.md).\n",
    )
    write_skill(
        root,
        "contract-testing",
        "Use when services need consumer-driven contract tests",
    )
    write_skill(
        root,
        "broken-skill",
        "Describes nothing useful",
    )
    return root


@_pytest.fixture(autouse=True)
def reset_package_logger() -> _typing.Iterator[None]:
    """Drop handlers the CLI attaches so they don't outlive the test's streams."""
    yield
    logger = _logging.getLogger("aetherskills")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(_logging.NOTSET)


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """Return environment dict with aether-skills keys removed."""
    return {k: v for k, v in _os.environ.items() if k not in ENV_KEYS_TO_CLEAR}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str], tmp_path: _pathlib.Path):
    """
    Context manager that isolates tests from the user's environment.

    The user config directory points at an empty temporary directory.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings()
    """
    env = dict(clean_env)
    env["AETHER_SKILLS_CONFIG_DIR"] = str(tmp_path / "user-config")
    return _mock.patch.dict(_os.environ, env, clear=True)
