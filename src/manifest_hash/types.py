"""Centralized TypedDict definitions for manifest-hash settings."""

from pathlib import Path
from typing import TypedDict


class NetworkConfig(TypedDict):
    """Network configuration options."""

    retry_attempts: int
    timeout_seconds: int


class DirectoryConfig(TypedDict):
    """Directory paths configuration."""

    logs: Path


class Settings(TypedDict):
    """Global settings loaded from ``settings.conf``."""

    config_version: str
    log_level: str
    console_log_level: str
    max_concurrent_lookups: int
    network: NetworkConfig
    directory: DirectoryConfig
