"""Path helpers for manifest-hash configuration."""

import os
from pathlib import Path

from manifest_hash.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_SUBDIR,
    ENV_CONFIG_DIR,
)


class Paths:
    """Application paths and directory structure."""

    HOME_DIR = Path.home()
    DEFAULT_CONFIG_DIR = HOME_DIR / DEFAULT_CONFIG_SUBDIR / CONFIG_DIR_NAME

    @classmethod
    def config_dir(cls) -> Path:
        """Return the configuration directory.

        ``MANIFEST_HASH_CONFIG_DIR`` takes precedence over the default
        ``~/.config/manifest-hash`` location.
        """
        override = os.getenv(ENV_CONFIG_DIR)
        if override:
            return cls.expand_path(override)
        return cls.DEFAULT_CONFIG_DIR

    @classmethod
    def settings_file(cls) -> Path:
        """Return the path of ``settings.conf``."""
        return cls.config_dir() / CONFIG_FILE_NAME

    @classmethod
    def logs_dir(cls) -> Path:
        """Return the default log directory."""
        return cls.config_dir() / "logs"

    @classmethod
    def expand_path(cls, path_str: str | Path) -> Path:
        """Expand ``~`` and resolve a configured path.

        Example:
            >>> Paths.expand_path("~/logs")
            Path('/home/user/logs')
        """
        return Path(path_str).expanduser().resolve(strict=False)
