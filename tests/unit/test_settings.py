"""Tests for settings loading from defaults, environment and YAML."""

import logging
from pathlib import Path

import pytest

from coparent_calendar.settings import (
    MAX_ICS_FILE_BYTES,
    CoparentSettings,
    get_settings,
    reset_settings,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def empty_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in a directory with no config/config.yaml or .env."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestDefaults:
    def test_defaults(self, empty_cwd):
        settings = CoparentSettings()

        assert settings.default_time_zone == "Europe/Oslo"
        assert settings.import_time_zone == "UTC"
        assert settings.default_start_time == "09:00"
        assert settings.default_end_time == "10:00"
        assert settings.max_ics_file_bytes == MAX_ICS_FILE_BYTES == 10 * 1024 * 1024
        assert settings.export_prodid == "-//Coparent Calendar//EN"
        assert settings.export_filename_prefix == "coparent-calendar"
        assert settings.max_occurrences == 20000
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, empty_cwd, monkeypatch):
        monkeypatch.setenv("COPARENT_MAX_OCCURRENCES", "25")
        monkeypatch.setenv("COPARENT_IMPORT_TIME_ZONE", "Europe/Oslo")

        settings = CoparentSettings()

        assert settings.max_occurrences == 25
        assert settings.import_time_zone == "Europe/Oslo"


class TestYamlConfig:
    """Tests for the optional YAML config file."""

    def test_values_loaded_from_file(self, tmp_path):
        config_file = tmp_path / "coparent.yaml"
        config_file.write_text("max_occurrences: 100\nexport_prodid: -//Family//EN\n")

        settings = CoparentSettings(config_file=config_file)

        assert settings.max_occurrences == 100
        assert settings.export_prodid == "-//Family//EN"

    def test_project_config_directory_is_found(self, empty_cwd):
        (empty_cwd / "config").mkdir()
        (empty_cwd / "config" / "config.yaml").write_text("log_level: DEBUG\n")

        assert CoparentSettings().log_level == "DEBUG"

    def test_explicit_arguments_win(self, tmp_path):
        config_file = tmp_path / "coparent.yaml"
        config_file.write_text("max_occurrences: 100\n")

        settings = CoparentSettings(config_file=config_file, max_occurrences=7)

        assert settings.max_occurrences == 7

    def test_environment_wins_over_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "coparent.yaml"
        config_file.write_text("max_occurrences: 100\n")
        monkeypatch.setenv("COPARENT_MAX_OCCURRENCES", "12")

        assert CoparentSettings(config_file=config_file).max_occurrences == 12

    def test_unknown_keys_are_ignored(self, tmp_path):
        config_file = tmp_path / "coparent.yaml"
        config_file.write_text("server_port: 8080\nlog_level: WARNING\n")

        settings = CoparentSettings(config_file=config_file)

        assert settings.log_level == "WARNING"
        assert not hasattr(settings, "server_port")

    def test_invalid_yaml_logs_warning(self, tmp_path, caplog):
        config_file = tmp_path / "coparent.yaml"
        config_file.write_text("max_occurrences: [unclosed\n")

        with caplog.at_level(logging.WARNING, logger="coparent_calendar.settings"):
            settings = CoparentSettings(config_file=config_file)

        assert settings.max_occurrences == 20000
        assert "Could not load YAML config" in caplog.text

    def test_non_mapping_yaml_is_ignored(self, tmp_path, caplog):
        config_file = tmp_path / "coparent.yaml"
        config_file.write_text("- just\n- a list\n")

        with caplog.at_level(logging.WARNING, logger="coparent_calendar.settings"):
            settings = CoparentSettings(config_file=config_file)

        assert settings.log_level == "INFO"
        assert "not a mapping" in caplog.text

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = CoparentSettings(config_file=tmp_path / "nope.yaml")
        assert settings.max_occurrences == 20000


class TestGlobalSettings:
    def test_get_settings_is_cached(self, empty_cwd):
        assert get_settings() is get_settings()

    def test_reset_settings_creates_new_instance(self, empty_cwd):
        first = get_settings()
        reset_settings()
        assert get_settings() is not first

    def test_config_file_from_environment(self, empty_cwd, monkeypatch):
        config_file = empty_cwd / "elsewhere.yaml"
        config_file.write_text("export_filename_prefix: family-plan\n")
        monkeypatch.setenv("COPARENT_CONFIG_FILE", str(config_file))

        assert get_settings().export_filename_prefix == "family-plan"
