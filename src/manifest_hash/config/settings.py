"""Settings manager for the INI configuration file."""

import configparser
import logging
from pathlib import Path

from manifest_hash.config.paths import Paths
from manifest_hash.constants import (
    CONFIG_FILE_NAME,
    CONFIG_VERSION,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_CONCURRENT_LOOKUPS,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_SECONDS,
    DIRECTORY_KEYS,
    KEY_CONFIG_VERSION,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_LOG_LEVEL,
    KEY_LOGS,
    KEY_MAX_CONCURRENT_LOOKUPS,
    KEY_RETRY_ATTEMPTS,
    KEY_TIMEOUT_SECONDS,
    SECTION_DEFAULT,
    SECTION_DIRECTORY,
    SECTION_NETWORK,
)
from manifest_hash.types import DirectoryConfig, NetworkConfig, Settings

# The logger package imports this module lazily, so the stdlib logger is
# used here to keep the import graph acyclic.
logger = logging.getLogger(__name__)

RawConfigDict = dict[str, str | dict[str, str]]

_FILE_HEADER = """\
# manifest-hash configuration
#
# log_level               File log level (DEBUG, INFO, WARNING, ERROR)
# console_log_level       Console log level
# max_concurrent_lookups  Bucket lookups / hash resolutions run at once
# [network]               Transport retries and timeouts
# [directory]             Where log files are written

"""


def _strip_inline_comment(value: str) -> str:
    """Remove a trailing ``  # comment`` from a configuration value."""
    if "  #" in value:
        return value.split("  #")[0].strip()
    return value


class SettingsManager:
    """Loads and saves ``settings.conf``."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize settings manager.

        Args:
            config_dir: Configuration directory path
                (defaults to ``Paths.config_dir()``)

        """
        self.config_dir = config_dir or Paths.config_dir()
        self.settings_file = self.config_dir / CONFIG_FILE_NAME

    def get_default_settings(self) -> RawConfigDict:
        """Return default settings as raw INI values."""
        return {
            KEY_CONFIG_VERSION: CONFIG_VERSION,
            KEY_LOG_LEVEL: DEFAULT_LOG_LEVEL,
            KEY_CONSOLE_LOG_LEVEL: DEFAULT_CONSOLE_LOG_LEVEL,
            KEY_MAX_CONCURRENT_LOOKUPS: str(DEFAULT_MAX_CONCURRENT_LOOKUPS),
            SECTION_NETWORK: {
                KEY_RETRY_ATTEMPTS: str(DEFAULT_RETRY_ATTEMPTS),
                KEY_TIMEOUT_SECONDS: str(DEFAULT_TIMEOUT_SECONDS),
            },
            SECTION_DIRECTORY: {
                KEY_LOGS: str(self.config_dir / "logs"),
            },
        }

    def _create_parser(
        self, defaults: RawConfigDict
    ) -> configparser.ConfigParser:
        """Create a ConfigParser pre-populated with defaults."""
        config = configparser.ConfigParser(
            inline_comment_prefixes=("#", ";"),
            interpolation=None,
        )

        flat_defaults = {
            key: str(value)
            for key, value in defaults.items()
            if not isinstance(value, dict)
        }
        config.read_dict({SECTION_DEFAULT: flat_defaults})

        for key, value in defaults.items():
            if isinstance(value, dict):
                config.add_section(key)
                for subkey, subvalue in value.items():
                    config.set(key, subkey, str(subvalue))

        return config

    def load_settings(self) -> Settings:
        """Load settings, writing a default file when none exists.

        Returns:
            Typed settings with user values layered over defaults

        """
        defaults = self.get_default_settings()
        config = self._create_parser(defaults)

        if self.settings_file.exists():
            try:
                config.read(self.settings_file, encoding="utf-8")
            except configparser.Error:
                logger.warning(
                    "Invalid settings file %s, using defaults",
                    self.settings_file,
                )
                config = self._create_parser(defaults)
        else:
            self.save_settings(self._convert_to_settings(config))

        return self._convert_to_settings(config)

    def save_settings(self, settings: Settings) -> None:
        """Write settings to ``settings.conf``.

        Args:
            settings: Settings to persist

        """
        config = configparser.ConfigParser(interpolation=None)
        config.read_dict(
            {
                SECTION_DEFAULT: {
                    KEY_CONFIG_VERSION: settings["config_version"],
                    KEY_LOG_LEVEL: settings["log_level"],
                    KEY_CONSOLE_LOG_LEVEL: settings["console_log_level"],
                    KEY_MAX_CONCURRENT_LOOKUPS: str(
                        settings["max_concurrent_lookups"]
                    ),
                },
                SECTION_NETWORK: {
                    key: str(value)
                    for key, value in settings["network"].items()
                },
                SECTION_DIRECTORY: {
                    key: str(value)
                    for key, value in settings["directory"].items()
                },
            }
        )

        self.config_dir.mkdir(parents=True, exist_ok=True)
        with self.settings_file.open("w", encoding="utf-8") as f:
            f.write(_FILE_HEADER)
            config.write(f)

    def _convert_to_settings(
        self, config: configparser.ConfigParser
    ) -> Settings:
        """Convert a populated parser to typed settings."""

        def get_int(section: str, key: str, default: int) -> int:
            raw = _strip_inline_comment(
                config.get(section, key, fallback=str(default))
            )
            try:
                return int(raw)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s.%s: %s, using %s",
                    section,
                    key,
                    raw,
                    default,
                )
                return default

        defaults = config.defaults()

        directory: dict[str, Path] = {}
        for key in DIRECTORY_KEYS:
            raw_path = config.get(SECTION_DIRECTORY, key, fallback=None)
            if raw_path is not None:
                directory[key] = Paths.expand_path(
                    _strip_inline_comment(raw_path)
                )

        return Settings(
            config_version=_strip_inline_comment(
                defaults.get(KEY_CONFIG_VERSION, CONFIG_VERSION)
            ),
            log_level=_strip_inline_comment(
                defaults.get(KEY_LOG_LEVEL, DEFAULT_LOG_LEVEL)
            ).upper(),
            console_log_level=_strip_inline_comment(
                defaults.get(KEY_CONSOLE_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL)
            ).upper(),
            max_concurrent_lookups=get_int(
                SECTION_DEFAULT,
                KEY_MAX_CONCURRENT_LOOKUPS,
                DEFAULT_MAX_CONCURRENT_LOOKUPS,
            ),
            network=NetworkConfig(
                retry_attempts=get_int(
                    SECTION_NETWORK,
                    KEY_RETRY_ATTEMPTS,
                    DEFAULT_RETRY_ATTEMPTS,
                ),
                timeout_seconds=get_int(
                    SECTION_NETWORK,
                    KEY_TIMEOUT_SECONDS,
                    DEFAULT_TIMEOUT_SECONDS,
                ),
            ),
            directory=DirectoryConfig(
                logs=directory.get(KEY_LOGS, self.config_dir / "logs"),
            ),
        )
