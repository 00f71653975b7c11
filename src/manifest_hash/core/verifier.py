"""Verifier class for downloaded artifact integrity checking.

This module computes the checksum of a downloaded file with the algorithm
of the authoritative hash and compares the two. A mismatch always raises.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from manifest_hash.constants import CHUNK_SIZE
from manifest_hash.domain.hashes import Hash, HashType
from manifest_hash.exceptions import HashMismatchError
from manifest_hash.logger import get_logger

if TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

BYTES_PER_UNIT = 1024.0


def format_bytes(num_bytes: float) -> str:
    """Convert a byte count to a human-readable string.

    Uses binary multiples (KB, MB, GB, ...) with one decimal place.
    Raises ``ValueError`` if the input is negative.
    """
    if num_bytes < 0:
        message = "Byte size cannot be negative"
        raise ValueError(message)

    units = ["B", "KB", "MB", "GB", "TB", "PB", "EB"]
    size = float(num_bytes)
    unit_index = 0

    while size >= BYTES_PER_UNIT and unit_index < len(units) - 1:
        size /= BYTES_PER_UNIT
        unit_index += 1

    return f"{size:.1f} {units[unit_index]}"


class Verifier:
    """Handles verification of a downloaded artifact."""

    def __init__(self, file_path: Path, chunk_size: int = CHUNK_SIZE) -> None:
        """Create verifier for a downloaded file."""
        self.file_path: Path = file_path
        self.chunk_size = chunk_size
        self._log_file_info()

    def _log_file_info(self) -> None:
        if self.file_path.exists():
            file_size = self.file_path.stat().st_size
            logger.debug("📁 File info: %s", self.file_path.name)
            logger.debug("   Path: %s", self.file_path)
            logger.debug(
                "   Size: %s (%s bytes)",
                format_bytes(file_size),
                f"{file_size:,}",
            )
        else:
            logger.warning("⚠️  File does not exist: %s", self.file_path)

    def compute_hash(self, hash_type: HashType | None = None) -> Hash:
        """Stream the file through ``hash_type`` (SHA256 by default).

        Raises:
            FileNotFoundError: If the file does not exist.

        """
        hash_type = hash_type or HashType.default()
        logger.debug("🧮 Computing %s hash...", hash_type.value.upper())
        return Hash.compute_file(self.file_path, hash_type, self.chunk_size)

    def verify(self, expected: Hash) -> Hash:
        """Verify the file against an authoritative checksum.

        The file is hashed with the algorithm of ``expected``.

        Args:
            expected: Authoritative checksum

        Returns:
            The computed checksum (equal to ``expected``)

        Raises:
            HashMismatchError: If the checksums differ
            FileNotFoundError: If the file does not exist

        """
        logger.debug(
            "🔍 Starting %s verification for %s",
            expected.hash_type.value.upper(),
            self.file_path.name,
        )
        logger.debug("   Expected hash: %s", expected)

        actual = self.compute_hash(expected.hash_type)
        logger.debug("   Computed hash: %s", actual)

        if actual != expected:
            logger.error("❌ Hash verification FAILED!")
            logger.error("   Expected: %s", expected)
            logger.error("   Actual:   %s", actual)
            logger.error("   File: %s", self.file_path)
            raise HashMismatchError(
                str(expected), str(actual), str(self.file_path)
            )

        logger.debug("✅ Hash verification PASSED!")
        return actual

    async def verify_async(self, expected: Hash) -> Hash:
        """Run :meth:`verify` on a worker thread."""
        return await asyncio.to_thread(self.verify, expected)
