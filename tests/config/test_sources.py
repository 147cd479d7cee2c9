"""Tests for layered YAML configuration files.

Tests for YamlConfigSettingsSource and helpers:
- Locating user and project config files
- Deep merging of layers
- Relative path resolution
- Handling missing and malformed files
"""

import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pytest as _pytest

import aetherskills.config.settings as settings
import aetherskills.config.sources as sources


class TestHelperFunctions:
    """Tests for path helper functions."""

    def test_user_config_dir_default(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("AETHER_SKILLS_CONFIG_DIR", raising=False)
        assert sources.get_user_config_dir() == _pathlib.Path.home() / ".config" / "aether-skills"

    def test_user_config_path_with_env_var(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AETHER_SKILLS_CONFIG_DIR", "/custom/config/dir")
        assert sources.get_user_config_path() == _pathlib.Path("/custom/config/dir/config.yaml")

    def test_project_config_path(self, tmp_path: _pathlib.Path) -> None:
        assert sources.get_project_config_path(tmp_path) == tmp_path / ".aether-skills.yaml"


class TestDeepMerge:
    def test_nested_dicts_merge(self) -> None:
        base = {"validation": {"strict": False, "body_soft_limit": 500}, "verbose": False}
        override = {"validation": {"strict": True}}

        merged = sources.deep_merge(base, override)

        assert merged == {
            "validation": {"strict": True, "body_soft_limit": 500},
            "verbose": False,
        }
        # Inputs are untouched
        assert base["validation"]["strict"] is False

    def test_lists_replace(self) -> None:
        merged = sources.deep_merge(
            {"validation": {"required_sections": ["Overview"]}},
            {"validation": {"required_sections": []}},
        )
        assert merged["validation"]["required_sections"] == []


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_missing_file_is_empty(self, tmp_path: _pathlib.Path) -> None:
        assert sources.load_config_file(tmp_path / "nope.yaml") == {}

    def test_empty_file_is_empty(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert sources.load_config_file(path) == {}

    def test_relative_paths_resolve_against_file(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "project" / ".aether-skills.yaml"
        path.parent.mkdir()
        path.write_text("skills_dir: catalog\ninstall_target: /opt/skills\n")

        data = sources.load_config_file(path)

        assert data["skills_dir"] == tmp_path / "project" / "catalog"
        assert data["install_target"] == _pathlib.Path("/opt/skills")

    def test_malformed_yaml_raises(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("validation: [unclosed\n")

        with _pytest.raises(sources.ConfigFileError, match="invalid YAML") as exc_info:
            sources.load_config_file(path)
        assert exc_info.value.path == path

    def test_non_mapping_raises(self, tmp_path: _pathlib.Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- one\n- two\n")

        with _pytest.raises(sources.ConfigFileError, match="must be a mapping"):
            sources.load_config_file(path)


class TestYamlConfigSettingsSource:
    """Tests for the layered settings source."""

    def test_project_layer_overrides_user_layer(self, tmp_path: _pathlib.Path) -> None:
        user_dir = tmp_path / "user"
        user_dir.mkdir()
        (user_dir / "config.yaml").write_text(
            "include_global: true\nvalidation:\n  strict: false\n  body_soft_limit: 800\n"
        )
        project = tmp_path / "project"
        project.mkdir()
        (project / ".aether-skills.yaml").write_text("validation:\n  strict: true\n")

        with _mock.patch.dict(_os.environ, {"AETHER_SKILLS_CONFIG_DIR": str(user_dir)}):
            source = sources.YamlConfigSettingsSource(settings.Settings, project)
            data = source()

        assert data == {
            "include_global": True,
            "validation": {"strict": True, "body_soft_limit": 800},
        }

    def test_config_paths_order(self, tmp_path: _pathlib.Path) -> None:
        with _mock.patch.dict(_os.environ, {"AETHER_SKILLS_CONFIG_DIR": str(tmp_path / "u")}):
            source = sources.YamlConfigSettingsSource(settings.Settings, tmp_path)
            paths = source.config_paths()

        assert paths == [tmp_path / "u" / "config.yaml", tmp_path / ".aether-skills.yaml"]

    def test_no_project_root_reads_user_config_only(self, tmp_path: _pathlib.Path) -> None:
        with _mock.patch.dict(_os.environ, {"AETHER_SKILLS_CONFIG_DIR": str(tmp_path)}):
            source = sources.YamlConfigSettingsSource(settings.Settings, None)
            assert source.config_paths() == [tmp_path / "config.yaml"]
            assert source() == {}
