"""Console formatters for the manifest-hash logging system.

INFO records are printed as bare messages; everything else gets the
structured, level-coloured layout so warnings about failed lookups stand
out from progress chatter.
"""

import logging

from manifest_hash.constants import LOG_COLORS


class ColoredConsoleFormatter(logging.Formatter):
    """Structured formatter that colours the level name."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record with an ANSI coloured level name.

        The level name is restored afterwards so other handlers sharing the
        record see the plain value.
        """
        if record.levelname not in LOG_COLORS:
            return super().format(record)

        original_levelname = record.levelname
        record.levelname = (
            f"{LOG_COLORS[original_levelname]}{original_levelname}"
            f"{LOG_COLORS['RESET']}"
        )
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


class SimpleConsoleFormatter(logging.Formatter):
    """Formatter that only outputs the message."""

    def format(self, record: logging.LogRecord) -> str:
        """Return the interpolated message without metadata."""
        return record.getMessage()


class HybridConsoleFormatter(logging.Formatter):
    """Simple format for INFO, coloured structured format otherwise.

    Example Output:
        INFO:     "Resolved hash for 7zip"
        WARNING:  "12:30:45 - manifest_hash.core.fetch - WARNING - Retrying"

    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
    ) -> None:
        """Initialize hybrid formatter.

        Args:
            fmt: Format string for structured messages
            datefmt: Date format string for timestamps

        """
        super().__init__(fmt, datefmt)
        self._simple_formatter = SimpleConsoleFormatter()
        self._colored_formatter = ColoredConsoleFormatter(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """Pick the formatter by record level."""
        if record.levelno == logging.INFO:
            return self._simple_formatter.format(record)
        return self._colored_formatter.format(record)
