"""Tests for the INI settings manager and path helpers."""

from pathlib import Path

import pytest

from manifest_hash.config import Paths, SettingsManager


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Provide an empty configuration directory."""
    directory = tmp_path / "config"
    directory.mkdir()
    return directory


@pytest.fixture
def settings_manager(config_dir: Path) -> SettingsManager:
    """SettingsManager bound to the temporary directory."""
    return SettingsManager(config_dir)


class TestSettingsManager:
    """Test cases for SettingsManager."""

    def test_defaults_written_on_first_load(self, settings_manager):
        """Test a default settings.conf is created when missing."""
        settings = settings_manager.load_settings()

        assert settings_manager.settings_file.exists()
        assert settings["log_level"] == "INFO"
        assert settings["console_log_level"] == "WARNING"
        assert settings["max_concurrent_lookups"] == 8
        assert settings["network"] == {
            "retry_attempts": 3,
            "timeout_seconds": 10,
        }
        assert settings["directory"]["logs"] == (
            settings_manager.config_dir / "logs"
        ).resolve()

    def test_user_values_override_defaults(self, settings_manager):
        """Test values from the file win over defaults."""
        settings_manager.settings_file.write_text(
            "[DEFAULT]\n"
            "log_level = debug\n"
            "max_concurrent_lookups = 2  # keep it gentle\n"
            "\n"
            "[network]\n"
            "retry_attempts = 5\n",
            encoding="utf-8",
        )

        settings = settings_manager.load_settings()

        assert settings["log_level"] == "DEBUG"
        assert settings["max_concurrent_lookups"] == 2
        assert settings["network"]["retry_attempts"] == 5
        assert settings["network"]["timeout_seconds"] == 10

    def test_invalid_integer_uses_default(self, settings_manager, caplog):
        """Test a non-numeric value falls back with a warning."""
        settings_manager.settings_file.write_text(
            "[network]\ntimeout_seconds = soon\n", encoding="utf-8"
        )

        settings = settings_manager.load_settings()

        assert settings["network"]["timeout_seconds"] == 10
        assert "Invalid integer" in caplog.text

    def test_invalid_file_uses_defaults(self, settings_manager, caplog):
        """Test an unparsable file is ignored with a warning."""
        settings_manager.settings_file.write_text(
            "no section header\n", encoding="utf-8"
        )

        settings = settings_manager.load_settings()

        assert settings["log_level"] == "INFO"
        assert "Invalid settings file" in caplog.text

    def test_save_and_reload(self, settings_manager, tmp_path):
        """Test saved settings load back unchanged."""
        settings = settings_manager.load_settings()
        settings["console_log_level"] = "ERROR"
        settings["network"]["retry_attempts"] = 1
        settings["directory"]["logs"] = tmp_path / "elsewhere"

        settings_manager.save_settings(settings)
        reloaded = settings_manager.load_settings()

        assert reloaded["console_log_level"] == "ERROR"
        assert reloaded["network"]["retry_attempts"] == 1
        assert reloaded["directory"]["logs"] == (
            tmp_path / "elsewhere"
        ).resolve()
        assert settings_manager.settings_file.read_text(
            encoding="utf-8"
        ).startswith("# manifest-hash configuration")


class TestPaths:
    """Test cases for Paths."""

    def test_config_dir_env_override(self, monkeypatch, tmp_path):
        """Test MANIFEST_HASH_CONFIG_DIR takes precedence."""
        monkeypatch.setenv("MANIFEST_HASH_CONFIG_DIR", str(tmp_path / "c"))

        assert Paths.config_dir() == (tmp_path / "c").resolve()
        assert Paths.settings_file() == (
            (tmp_path / "c").resolve() / "settings.conf"
        )
        assert Paths.logs_dir() == (tmp_path / "c").resolve() / "logs"

    def test_config_dir_default(self, monkeypatch):
        """Test the default location under ~/.config."""
        monkeypatch.delenv("MANIFEST_HASH_CONFIG_DIR", raising=False)

        assert Paths.config_dir() == (
            Path.home() / ".config" / "manifest-hash"
        )

    def test_expand_path(self):
        """Test ~ is expanded."""
        assert Paths.expand_path("~/logs") == (Path.home() / "logs").resolve()
