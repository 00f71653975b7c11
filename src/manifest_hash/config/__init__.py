"""Configuration management: INI settings and path helpers."""

from manifest_hash.config.paths import Paths
from manifest_hash.config.settings import SettingsManager
from manifest_hash.types import Settings

__all__ = ["Paths", "Settings", "SettingsManager"]
