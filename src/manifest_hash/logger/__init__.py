"""Logging utilities for manifest-hash.

All package loggers hang off the ``manifest_hash`` root logger, which holds a
single ``QueueHandler``. A ``QueueListener`` thread feeds the console and
rotating file handlers so coroutines resolving hashes never block on log
I/O.

Usage:
    >>> from manifest_hash.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Resolved %s", manifest.name)  # %-style, never f-strings

Environment Variables:
    MANIFEST_HASH_LOG_DIR: Overrides the log directory (used by pytest).
"""

from manifest_hash.logger.formatters import (
    ColoredConsoleFormatter,
    HybridConsoleFormatter,
    SimpleConsoleFormatter,
)
from manifest_hash.logger.handlers import ConfigurationError
from manifest_hash.logger.logger import (
    clear_logger_state,
    flush_all_handlers,
    get_logger,
    load_log_settings,
    setup_logging,
)
from manifest_hash.logger.logger import (
    update_logger_from_config as _update_config,
)
from manifest_hash.logger.state import get_state

__all__ = [
    "ColoredConsoleFormatter",
    "ConfigurationError",
    "HybridConsoleFormatter",
    "SimpleConsoleFormatter",
    "clear_logger_state",
    "flush_all_handlers",
    "get_logger",
    "load_log_settings",
    "setup_logging",
    "update_logger_from_config",
]


def update_logger_from_config() -> None:
    """Apply settings file log levels using the global logger state."""
    _update_config(get_state())
