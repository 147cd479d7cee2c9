"""
Install catalog skills into a global skills directory.

An assistant picks up installed skills from its own config directory
(~/.claude/skills/ or ~/.config/opencode/skill/). Installing copies
the whole skill directory there, replacing any previous copy once the
new copy is complete.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import shutil as _shutil
import tempfile as _tempfile
import typing as _typing

import aetherskills.constants as constants
import aetherskills.skills.discovery as discovery
import aetherskills.skills.errors as errors
import aetherskills.skills.validation as validation

_logger = _logging.getLogger(__name__)


def resolve_install_target(
    target: _pathlib.Path | None = None,
    *,
    claude_dir: _pathlib.Path | None = None,
    opencode_dir: _pathlib.Path | None = None,
    create: bool = True,
) -> _pathlib.Path:
    """
    Choose the directory skills are installed into.

    Order: explicit target, an existing Claude skills directory, an
    existing OpenCode skills directory, else the Claude directory
    (created when create is set).

    Args:
        target: Explicit target directory.
        claude_dir: Override for the Claude skills directory.
        opencode_dir: Override for the OpenCode skills directory.
        create: Create the chosen directory if missing.

    Returns:
        The install directory.
    """
    claude_dir = claude_dir or discovery.get_claude_skills_path()
    opencode_dir = opencode_dir or discovery.get_opencode_skills_path()

    if target is not None:
        chosen = target
    elif claude_dir.is_dir():
        chosen = claude_dir
    elif opencode_dir.is_dir():
        chosen = opencode_dir
    else:
        chosen = claude_dir

    if create:
        chosen.mkdir(parents=True, exist_ok=True)
    return chosen


@_dataclasses.dataclass
class InstallReport:
    """Outcome of installing several skills."""

    target: _pathlib.Path
    installed: list[str] = _dataclasses.field(default_factory=list)
    skipped: dict[str, str] = _dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "target": str(self.target),
            "installed": self.installed,
            "skipped": self.skipped,
        }


class SkillInstaller:
    """Copies skills from a catalog directory into an install target."""

    def __init__(
        self,
        catalog_dir: _pathlib.Path,
        target: _pathlib.Path,
        validator: validation.SkillValidator | None = None,
    ) -> None:
        """
        Initialize the installer.

        Args:
            catalog_dir: Directory holding the skills to install.
            target: Directory the skills are copied into.
            validator: Validator gating installation.
        """
        self._catalog_dir = catalog_dir
        self._target = target
        self._validator = validator or validation.SkillValidator()

    @property
    def target(self) -> _pathlib.Path:
        return self._target

    def _skill_dir(self, name: str) -> _pathlib.Path:
        if not self._catalog_dir.is_dir():
            raise errors.SkillsDirectoryNotFoundError(self._catalog_dir)
        skill_dir = self._catalog_dir / name
        # Names are single path components
        if (
            not name
            or _pathlib.Path(name).name != name
            or name.startswith(".")
            or not skill_dir.is_dir()
        ):
            raise errors.SkillNotFoundError(name, self._catalog_dir)
        return skill_dir

    def install(self, name: str, *, force: bool = False) -> _pathlib.Path:
        """
        Install one skill.

        Args:
            name: Skill directory name in the catalog.
            force: Install even if validation reports errors.

        Returns:
            Path of the installed copy.

        Raises:
            SkillNotFoundError: If the catalog has no such skill.
            SkillInstallError: If the skill is invalid (without force)
                or the copy fails.
        """
        skill_dir = self._skill_dir(name)

        result = self._validator.validate_dir(skill_dir)
        if not result.valid and not force:
            problems = "; ".join(i.message for i in result.errors)
            raise errors.SkillInstallError(
                f"Refusing to install invalid skill {name}: {problems}"
            )

        destination = self._target / name
        _logger.info("Installing %s to %s", name, destination)
        try:
            self._target.mkdir(parents=True, exist_ok=True)
            self._replace(skill_dir, destination)
        except OSError as e:
            raise errors.SkillInstallError(f"Failed to install skill {name}: {e}") from e

        return destination

    def _replace(self, skill_dir: _pathlib.Path, destination: _pathlib.Path) -> None:
        """
        Copy skill_dir to destination, keeping any previous copy until done.

        The new copy is staged in a hidden sibling directory and renamed
        into place only after the copy completes, so a failed copy
        leaves the installed version untouched.
        """
        staging = _pathlib.Path(
            _tempfile.mkdtemp(prefix=f".{destination.name}-", dir=self._target)
        )
        try:
            staged = staging / destination.name
            _shutil.copytree(skill_dir, staged)

            previous = staging / "previous"
            if destination.exists():
                destination.rename(previous)
            try:
                staged.rename(destination)
            except OSError:
                if previous.exists():
                    previous.rename(destination)
                raise
        finally:
            _shutil.rmtree(staging, ignore_errors=True)

    def install_all(self, *, force: bool = False) -> InstallReport:
        """
        Install every skill in the catalog.

        Invalid skills are skipped (unless force) and recorded in the
        report rather than aborting the run.
        """
        if not self._catalog_dir.is_dir():
            raise errors.SkillsDirectoryNotFoundError(self._catalog_dir)

        report = InstallReport(target=self._target)
        for skill_dir in sorted(self._catalog_dir.iterdir()):
            if not skill_dir.is_dir() or skill_dir.name.startswith("."):
                continue
            if not (skill_dir / constants.SKILL_FILE_NAME).is_file() and not force:
                report.skipped[skill_dir.name] = "SKILL.md not found"
                continue
            try:
                self.install(skill_dir.name, force=force)
            except errors.SkillInstallError as e:
                report.skipped[skill_dir.name] = str(e)
                continue
            report.installed.append(skill_dir.name)
        return report

    def uninstall(self, name: str) -> _pathlib.Path:
        """
        Remove an installed skill from the target.

        Raises:
            SkillNotFoundError: If the skill is not installed there.
        """
        destination = self._target / name
        if not name or _pathlib.Path(name).name != name or not destination.is_dir():
            raise errors.SkillNotFoundError(name, self._target)
        _logger.info("Removing %s", destination)
        _shutil.rmtree(destination)
        return destination
