"""Public logging API: setup, lookup, flushing and test cleanup."""

import atexit
import contextlib
import logging
import os
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from manifest_hash.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_CONFIG_SUBDIR,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_DIR,
    LOG_FILE_NAME,
    LOG_ROOT_NAME,
)
from manifest_hash.logger.handlers import setup_root_logger
from manifest_hash.logger.state import _LoggerState, get_state


def load_log_settings() -> tuple[str, str, Path]:
    """Return bootstrap console level, file level and log file path.

    Settings are not read here to avoid importing the config package while
    modules are still being initialised; ``update_logger_from_config``
    applies them later. ``MANIFEST_HASH_LOG_DIR`` redirects the log file,
    which keeps test runs out of the user's config directory.
    """
    env_log_dir = os.getenv(ENV_LOG_DIR)
    if env_log_dir:
        log_dir = Path(env_log_dir).expanduser()
    else:
        log_dir = (
            Path.home() / DEFAULT_CONFIG_SUBDIR / CONFIG_DIR_NAME / "logs"
        )

    return (
        DEFAULT_CONSOLE_LOG_LEVEL,
        DEFAULT_LOG_LEVEL,
        log_dir / LOG_FILE_NAME,
    )


def flush_all_handlers() -> None:
    """Wait for the log queue to drain and flush every handler."""
    state = get_state()
    if state.queue_listener is None or state.log_queue is None:
        return

    timeout = 5.0
    start_time = time.time()
    while not state.log_queue.empty():
        if time.time() - start_time > timeout:
            break
        time.sleep(0.01)

    # Records may be dequeued but not yet written
    time.sleep(0.1)

    for handler in state.queue_listener.handlers:
        with contextlib.suppress(OSError, ValueError):
            handler.flush()


def _cleanup_logging() -> None:
    """Stop the queue listener at interpreter exit."""
    state = get_state()
    if state.queue_listener is not None:
        flush_all_handlers()
        state.queue_listener.stop()
        state.queue_listener = None


atexit.register(_cleanup_logging)


def setup_logging(
    name: str = LOG_ROOT_NAME,
    console_level: str | None = None,
    file_level: str | None = None,
    log_file: Path | None = None,
    enable_file_logging: bool = True,  # noqa: FBT001, FBT002
) -> logging.Logger:
    """Configure the root logger once and return the named logger.

    Args:
        name: Logger name, typically ``__name__``
        console_level: Console log level ("DEBUG", "INFO", "WARNING")
        file_level: File log level ("DEBUG", "INFO")
        log_file: Path to log file
        enable_file_logging: Whether to enable file logging

    Returns:
        Logger instance from ``logging.getLogger``

    Raises:
        ConfigurationError: If file logging setup fails

    """
    state = get_state()
    with state.lock:
        if not state.root_initialized:
            cfg_console, cfg_file, cfg_path = load_log_settings()
            setup_root_logger(
                state,
                console_level or cfg_console,
                file_level or cfg_file,
                log_file or cfg_path,
                enable_file_logging,
            )

    return logging.getLogger(name)


def get_logger(
    name: str = LOG_ROOT_NAME,
    enable_file_logging: bool = True,  # noqa: FBT001, FBT002
) -> logging.Logger:
    """Get a module logger, initializing the root logger if needed.

    Example:
        >>> from manifest_hash.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("Fetching %s", url)

    """
    return setup_logging(name=name, enable_file_logging=enable_file_logging)


def update_logger_from_config(state: _LoggerState) -> None:
    """Apply log levels from the settings file to the running handlers.

    Only handler levels change; handlers are never added or removed.
    """
    from manifest_hash.config import SettingsManager  # noqa: PLC0415

    settings = SettingsManager().load_settings()
    console_level = getattr(
        logging, settings["console_log_level"], logging.WARNING
    )
    file_level = getattr(logging, settings["log_level"], logging.INFO)

    if state.queue_listener is not None:
        for handler in state.queue_listener.handlers:
            if isinstance(handler, RotatingFileHandler):
                handler.setLevel(file_level)
            elif isinstance(handler, logging.StreamHandler):
                handler.setLevel(console_level)

    state.config_applied = True


def clear_logger_state() -> None:
    """Reset logging to an uninitialized state.

    Intended for tests only: stops the listener and closes handlers.
    Loggers named ``test-*`` are also dropped from the logging manager;
    package loggers stay registered since modules hold references to them.
    """
    state = get_state()
    with state.lock:
        if state.queue_listener is not None:
            flush_all_handlers()
            state.queue_listener.stop()
            state.queue_listener = None

        state.log_queue = None
        state.root_initialized = False
        state.config_applied = False

        for logger_name in list(logging.Logger.manager.loggerDict.keys()):
            if not logger_name.startswith((LOG_ROOT_NAME, "test-")):
                continue
            log_instance = logging.getLogger(logger_name)
            for handler in log_instance.handlers[:]:
                handler.close()
                log_instance.removeHandler(handler)
            if logger_name.startswith("test-"):
                logging.Logger.manager.loggerDict.pop(logger_name, None)
