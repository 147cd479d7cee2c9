"""Custom pydantic-settings sources for aether-skills configuration.

This module provides:

- YamlConfigSettingsSource: A pydantic-settings source that loads
  configuration from layered YAML files.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
2. Project config: .aether-skills.yaml in project root
3. User config: ~/.config/aether-skills/config.yaml (or AETHER_SKILLS_CONFIG_DIR)

Nested mappings merge key by key; other values from a higher layer
replace those from a lower one. Relative paths in a file resolve
against the directory holding that file.

Environment variables:
- AETHER_SKILLS_CONFIG_DIR: Override user config directory
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "AETHER_SKILLS_CONFIG_DIR"

PROJECT_CONFIG_NAME = ".aether-skills.yaml"
USER_CONFIG_NAME = "config.yaml"

# Top-level keys holding filesystem paths
_PATH_KEYS = (
    "skills_dir",
    "install_target",
    "claude_skills_dir",
    "opencode_skills_dir",
)


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def get_user_config_dir() -> _pathlib.Path:
    """User config directory, honoring AETHER_SKILLS_CONFIG_DIR."""
    if override := _os.environ.get(ENV_CONFIG_DIR):
        return _pathlib.Path(override).expanduser()
    return _pathlib.Path.home() / ".config" / "aether-skills"


def get_user_config_path() -> _pathlib.Path:
    return get_user_config_dir() / USER_CONFIG_NAME


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    return project_root / PROJECT_CONFIG_NAME


def deep_merge(
    base: dict[str, _typing.Any],
    override: dict[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Merge override into a copy of base.

    Nested dicts merge recursively; everything else is replaced.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_file(path: _pathlib.Path) -> dict[str, _typing.Any]:
    """
    Load one YAML config file.

    Missing files load as an empty mapping.

    Raises:
        ConfigFileError: If the file is unreadable, malformed, or not a mapping.
    """
    if not path.is_file():
        return {}

    try:
        content = path.read_text(encoding="utf-8")
        data = _yaml.safe_load(content)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(path, str(e)) from e
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(path, "top level must be a mapping")

    for key in _PATH_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value:
            p = _pathlib.Path(value).expanduser()
            if not p.is_absolute():
                p = path.parent / p
            data[key] = p

    return data


class YamlConfigSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that loads layered YAML config files.

    Layers (lowest to highest precedence):
    1. User config (~/.config/aether-skills/config.yaml)
    2. Project config (<project_root>/.aether-skills.yaml)

    Files are read once per source instance.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None,
    ) -> None:
        super().__init__(settings_cls)
        self._project_root = project_root
        self._data: dict[str, _typing.Any] | None = None

    def config_paths(self) -> list[_pathlib.Path]:
        """Config file locations, lowest precedence first."""
        paths = [get_user_config_path()]
        if self._project_root is not None:
            paths.append(get_project_config_path(self._project_root))
        return paths

    def _load(self) -> dict[str, _typing.Any]:
        if self._data is None:
            merged: dict[str, _typing.Any] = {}
            for path in self.config_paths():
                merged = deep_merge(merged, load_config_file(path))
            self._data = merged
        return self._data

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        return self._load().get(field_name), field_name, False

    def __call__(self) -> dict[str, _typing.Any]:
        return dict(self._load())
