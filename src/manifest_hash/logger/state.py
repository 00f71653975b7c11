"""Logger state shared by the whole package.

The root ``manifest_hash`` logger is configured exactly once; this module
holds the flags and the queue machinery that guard that initialization.
"""

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import queue
    from logging.handlers import QueueListener


class _LoggerState:
    """Container for logger state (avoids module-level mutable globals).

    Attributes:
        lock: Thread lock for root logger initialization
        root_initialized: Whether the root logger has been set up
        config_applied: Whether settings file levels have been applied
        queue_listener: Background thread writing log records
        log_queue: Queue between QueueHandler and QueueListener

    """

    def __init__(self) -> None:
        """Initialize logger state."""
        self.lock = threading.Lock()
        self.root_initialized = False
        self.config_applied = False
        self.queue_listener: QueueListener | None = None
        self.log_queue: queue.Queue | None = None


_state = _LoggerState()


def get_state() -> _LoggerState:
    """Return the global logger state."""
    return _state
