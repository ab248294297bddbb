# tests/test_settings.py
"""
Tests for the settings management in updategen/settings.py.
"""

import json
from pathlib import Path

import pytest

from updategen import config
from updategen import settings as app_settings
from updategen.settings import GeneratorConfig


@pytest.fixture(autouse=True)
def restore_settings(mocker):
    """save_setting updates the in-memory settings; undo that after each test."""
    mocker.patch.dict(app_settings.settings)


class TestSettings:
    """Test suite for settings management."""

    def test_save_setting_bool(self, fake_fs):
        """Tests saving a boolean value from a string."""
        assert app_settings.save_setting("enable_logging", "false")
        with open(config.SETTINGS_FILE, "r") as f:
            data = json.load(f)
        assert data["enable_logging"] is False
        assert app_settings.settings["enable_logging"] is False

    def test_save_setting_int(self, fake_fs):
        """Tests saving an integer value from a string."""
        app_settings.save_setting("git_timeout", "120")
        with open(config.SETTINGS_FILE, "r") as f:
            data = json.load(f)
        assert data["git_timeout"] == 120

    def test_save_setting_list(self, fake_fs):
        """Lists are given comma separated."""
        app_settings.save_setting("manifest_files", "composer.json, package.json,")
        with open(config.SETTINGS_FILE, "r") as f:
            data = json.load(f)
        assert data["manifest_files"] == ["composer.json", "package.json"]

    def test_save_setting_mapping_is_refused(self, fake_fs, capsys):
        assert not app_settings.save_setting("sanitize_env", "APP_DEBUG=false")
        assert "is a mapping" in capsys.readouterr().out
        assert not config.SETTINGS_FILE.exists()

    def test_save_setting_invalid_bool(self, fake_fs, capsys):
        assert not app_settings.save_setting("enable_logging", "maybe")
        assert "Invalid boolean value" in capsys.readouterr().out

    def test_save_setting_unknown_key(self, capsys):
        """Tests that an unknown key is handled gracefully."""
        assert not app_settings.save_setting("non_existent_key", "some_value")
        captured = capsys.readouterr()
        assert "Unknown setting" in captured.out

    def test_load_merges_user_settings_over_defaults(self, fake_fs):
        fake_fs.create_file(config.SETTINGS_FILE, contents='{"git_timeout": 10}')
        loaded = app_settings._load_settings()
        assert loaded["git_timeout"] == 10
        assert loaded["enable_logging"] is True

    def test_load_with_corrupt_file_uses_defaults(self, fake_fs):
        fake_fs.create_file(config.SETTINGS_FILE, contents="{not json")
        loaded = app_settings._load_settings()
        assert loaded["git_timeout"] == config.GIT_COMMAND_TIMEOUT


class TestGeneratorConfig:
    """Test suite for GeneratorConfig.from_settings."""

    @pytest.fixture(autouse=True)
    def clear_env(self, monkeypatch):
        monkeypatch.delenv("UPDATEGEN_PROJECT_ROOT", raising=False)
        monkeypatch.delenv("UPDATEGEN_OUTPUT_DIRECTORY", raising=False)

    def test_relative_output_directory_is_under_project(self, tmp_path):
        cfg = GeneratorConfig.from_settings(
            app_settings._get_default_settings(), project_root=tmp_path
        )
        assert cfg.project_root == tmp_path.resolve()
        assert cfg.output_directory == tmp_path.resolve() / "storage/app/update_files"
        assert cfg.git_timeout == config.GIT_COMMAND_TIMEOUT
        assert "vendor" in cfg.exclude_update

    def test_absolute_output_directory(self, tmp_path):
        cfg = GeneratorConfig.from_settings(
            app_settings._get_default_settings(),
            project_root=tmp_path,
            output_directory=tmp_path / "elsewhere",
        )
        assert cfg.output_directory == tmp_path / "elsewhere"

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UPDATEGEN_PROJECT_ROOT", str(tmp_path))
        monkeypatch.setenv("UPDATEGEN_OUTPUT_DIRECTORY", "dist")
        cfg = GeneratorConfig.from_settings(app_settings._get_default_settings())
        assert cfg.project_root == tmp_path.resolve()
        assert cfg.output_directory == tmp_path.resolve() / "dist"

    def test_defaults_to_current_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cfg = GeneratorConfig.from_settings(app_settings._get_default_settings())
        assert cfg.project_root == Path(tmp_path).resolve()

    def test_is_frozen(self, tmp_path):
        cfg = GeneratorConfig.from_settings(
            app_settings._get_default_settings(), project_root=tmp_path
        )
        with pytest.raises(AttributeError):
            cfg.git_timeout = 1
