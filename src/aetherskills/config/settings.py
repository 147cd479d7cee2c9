"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with AETHER_SKILLS_ prefix
3. Layered YAML config files:
   - Project config: .aether-skills.yaml (higher)
   - User config: ~/.config/aether-skills/config.yaml (lower)
4. Field defaults

Nested config uses double underscore delimiter:
  AETHER_SKILLS_VALIDATION__STRICT=true
  AETHER_SKILLS_VALIDATION__BODY_SOFT_LIMIT=800
"""

import pathlib as _pathlib
import subprocess as _subprocess
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import aetherskills.config.sources as sources
import aetherskills.constants as constants

if _typing.TYPE_CHECKING:
    import aetherskills.skills as skills

LogLevel = _typing.Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Files and directories that mark a project root
_PROJECT_MARKERS = (
    sources.PROJECT_CONFIG_NAME,
    constants.DEFAULT_CATALOG_DIR_NAME,
    "pyproject.toml",
    ".git",
)


def find_git_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path | None:
    """Find the git repository root from the given path or current directory."""
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    try:
        result = _subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            cwd=start_path,
            timeout=5,
        )
        if result.returncode == 0:
            return _pathlib.Path(result.stdout.strip())
    except (_subprocess.TimeoutExpired, FileNotFoundError, OSError):
        pass
    return None


def find_project_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path:
    """
    Find the project root directory.

    Tries (in order):
    1. Nearest ancestor containing .aether-skills.yaml, skills/,
       pyproject.toml or .git
    2. Git repository root
    3. The start directory
    """
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    current = start_path.resolve()
    while True:
        for marker in _PROJECT_MARKERS:
            if (current / marker).exists():
                return current
        if current == current.parent:
            break
        current = current.parent

    git_root = find_git_root(start_path)
    if git_root:
        return git_root

    return start_path.resolve()


class ValidationConfig(_pydantic.BaseModel):
    """Rules applied when validating skills."""

    description_prefix: str = _pydantic.Field(
        default=constants.DEFAULT_DESCRIPTION_PREFIX,
        description="Text every description must start with (empty disables the check)",
    )

    body_soft_limit: int = _pydantic.Field(
        default=constants.SKILL_BODY_SOFT_LIMIT,
        ge=1,
        description="Body line count above which a warning is raised",
    )

    required_sections: list[str] = _pydantic.Field(
        default_factory=lambda: list(constants.DEFAULT_REQUIRED_SECTIONS),
        description="Level-2 headings whose absence is a warning",
    )

    strict: bool = _pydantic.Field(
        default=False,
        description="Treat warnings as failures",
    )


class Settings(_pydantic_settings.BaseSettings):
    """
    aether-skills configuration settings.

    All settings can be overridden via environment variables with the
    AETHER_SKILLS_ prefix. For nested config, use double underscore:
    AETHER_SKILLS_VALIDATION__STRICT=true
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="AETHER_SKILLS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args) - highest
        2. env_settings (AETHER_SKILLS_* env vars)
        3. yaml settings (project, then user config)
        4. (defaults via Field definitions) - lowest
        """
        init_kwargs = getattr(init_settings, "init_kwargs", {}) or {}
        project_root = init_kwargs.get("project_root")
        if project_root is None:
            project_root = find_project_root()

        return (
            init_settings,
            env_settings,
            sources.YamlConfigSettingsSource(settings_cls, _pathlib.Path(project_root)),
        )

    project_root: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Project root (detected from the working directory if unset)",
    )

    skills_dir: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Catalog directory (defaults to <project_root>/skills)",
    )

    include_global: bool = _pydantic.Field(
        default=False,
        description="Also discover installed global skills",
    )

    install_target: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Install directory (auto-selected if unset)",
    )

    claude_skills_dir: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Override for ~/.claude/skills",
    )

    opencode_skills_dir: _pathlib.Path | None = _pydantic.Field(
        default=None,
        description="Override for ~/.config/opencode/skill",
    )

    validation: ValidationConfig = _pydantic.Field(default_factory=ValidationConfig)
    """Validation rules."""

    tokenizer_model: str = _pydantic.Field(
        default=constants.DEFAULT_TOKENIZER_MODEL,
        description="Model name used to pick a tokenizer for estimates",
    )

    verbose: bool = _pydantic.Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: LogLevel = _pydantic.Field(
        default="WARNING",
        description="Log level when not verbose",
    )

    @_pydantic.field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: _typing.Any) -> _typing.Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def root(self) -> _pathlib.Path:
        """Project root, detected when not configured."""
        if self.project_root is not None:
            return self.project_root
        return find_project_root()

    @property
    def catalog_dir(self) -> _pathlib.Path:
        """Directory holding the skill catalog."""
        if self.skills_dir is not None:
            return self.skills_dir.expanduser()
        return self.root / constants.DEFAULT_CATALOG_DIR_NAME

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level

    def build_validator(self) -> "skills.SkillValidator":
        """Create a validator from the validation settings."""
        import aetherskills.skills as skills

        return skills.SkillValidator(
            description_prefix=self.validation.description_prefix,
            body_soft_limit=self.validation.body_soft_limit,
            required_sections=self.validation.required_sections,
        )

    def build_registry(self) -> "skills.SkillRegistry":
        """Create a registry over the configured catalog."""
        import aetherskills.skills as skills

        discovery = skills.SkillDiscovery(
            self.catalog_dir,
            include_global=self.include_global,
            claude_dir=self.claude_skills_dir,
            opencode_dir=self.opencode_skills_dir,
        )
        return skills.SkillRegistry(discovery, validator=self.build_validator())

    def to_dict(self) -> dict[str, _typing.Any]:
        """Effective settings for display."""
        data = self.model_dump(mode="json")
        data["project_root"] = str(self.root)
        data["catalog_dir"] = str(self.catalog_dir)
        return data
