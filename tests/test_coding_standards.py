"""
Tests that enforce coding standards.

These tests verify that the codebase follows our import conventions
and keeps terminal output inside the CLI package.
"""

import pathlib as _pathlib
import re as _re

import pytest as _pytest

SRC_DIR = _pathlib.Path(__file__).parent.parent / "src" / "aetherskills"
TESTS_DIR = _pathlib.Path(__file__).parent.parent / "tests"

# Only the CLI talks to the terminal
_TERMINAL_RE = _re.compile(r"^\s*(print\(|import click|import rich)")


def _python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    return sorted(directory.rglob("*.py"))


def _extract_from_imports(content: str) -> list[tuple[int, str]]:
    """
    Extract 'from X import Y' statements from file content.

    Returns list of (line_number, line_content) tuples.
    Excludes:
    - 'from __future__ import' (allowed)
    - Lines inside TYPE_CHECKING blocks (allowed)
    """
    imports: list[tuple[int, str]] = []
    in_type_checking = False

    for i, line in enumerate(content.split("\n"), start=1):
        stripped = line.strip()

        if "if _typing.TYPE_CHECKING:" in line or "if TYPE_CHECKING:" in line:
            in_type_checking = True
            continue

        # Block ends at the next unindented statement
        if in_type_checking and stripped and not stripped.startswith("#") and line[0] not in " \t":
            in_type_checking = False

        if in_type_checking:
            continue

        if stripped.startswith("from ") and " import " in stripped:
            if stripped.startswith("from __future__ import"):
                continue
            imports.append((i, stripped))

    return imports


def _from_import_violations(paths: list[_pathlib.Path]) -> list[str]:
    violations: list[str] = []
    for path in paths:
        # Package __init__ files re-export names
        if path.name == "__init__.py":
            continue
        for line_num, line in _extract_from_imports(path.read_text()):
            violations.append(f"{path}:{line_num}: {line}")
    return violations


class TestImportStyle:
    """Tests for import style compliance."""

    def test_src_no_from_imports(self) -> None:
        """Source files should use 'import X as _x' rather than 'from X import Y'."""
        violations = _from_import_violations(_python_files(SRC_DIR))
        if violations:
            _pytest.fail(
                "Found forbidden 'from X import Y' imports:\n"
                + "\n".join(f"  {v}" for v in violations)
            )

    def test_tests_no_from_imports(self) -> None:
        paths = [p for p in _python_files(TESTS_DIR) if p.name != "test_coding_standards.py"]
        violations = _from_import_violations(paths)
        if violations:
            _pytest.fail(
                "Found forbidden 'from X import Y' imports:\n"
                + "\n".join(f"  {v}" for v in violations)
            )


class TestLibraryBoundaries:
    """Library code logs; only the CLI prints."""

    def test_no_terminal_output_outside_cli(self) -> None:
        violations: list[str] = []
        for path in _python_files(SRC_DIR):
            if "cli" in path.relative_to(SRC_DIR).parts:
                continue
            for i, line in enumerate(path.read_text().split("\n"), start=1):
                if _TERMINAL_RE.match(line):
                    violations.append(f"{path}:{i}: {line.strip()}")
        if violations:
            _pytest.fail("Terminal output outside the CLI:\n" + "\n".join(violations))

    def test_loggers_are_module_scoped(self) -> None:
        """Loggers are created with __name__ so they nest under 'aetherskills'."""
        for path in _python_files(SRC_DIR):
            for line in path.read_text().split("\n"):
                if "_logging.getLogger(" in line and "=" in line and "_logger" in line:
                    assert "getLogger(__name__)" in line, f"{path}: {line.strip()}"


class TestImportExtraction:
    """Tests for the import extraction logic itself."""

    def test_detects_from_import(self) -> None:
        imports = _extract_from_imports("from pathlib import Path")
        assert imports == [(1, "from pathlib import Path")]

    def test_allows_future_imports(self) -> None:
        assert _extract_from_imports("from __future__ import annotations") == []

    def test_type_checking_block_scope(self) -> None:
        content = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from allowed import Type

from forbidden import Other
"""
        imports = _extract_from_imports(content)
        assert len(imports) == 1
        assert "from forbidden import Other" in imports[0][1]
