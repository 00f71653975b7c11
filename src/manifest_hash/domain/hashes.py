"""Checksum value model.

A :class:`Hash` is a lowercase hex digest tagged with its algorithm. The
algorithm is inferred from the digest length alone; a length that maps to no
algorithm is rejected, so every ``Hash`` in circulation is well formed.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, BinaryIO

from manifest_hash.constants import (
    CHUNK_SIZE,
    HASH_HEX_LENGTHS,
    HEX_CHARACTERS,
)
from manifest_hash.exceptions import InvalidHashError

if TYPE_CHECKING:
    from pathlib import Path


class HashType(Enum):
    """Supported checksum algorithms."""

    SHA512 = "sha512"
    SHA256 = "sha256"
    SHA1 = "sha1"
    MD5 = "md5"

    @classmethod
    def default(cls) -> HashType:
        """Return the algorithm assumed when none is written."""
        return cls.SHA256

    @property
    def hex_length(self) -> int:
        """Length of a hex digest produced by this algorithm."""
        return HASH_HEX_LENGTHS[self.value]

    @property
    def prefix(self) -> str:
        """Display prefix; SHA256 is printed bare."""
        if self is HashType.SHA256:
            return ""
        return f"{self.value}:"

    @classmethod
    def from_hex(cls, value: str) -> HashType:
        """Infer the algorithm from a hex digest length.

        This is a heuristic: it relies on every supported algorithm having
        a distinct digest length.

        Raises:
            InvalidHashError: If the length matches no algorithm.

        """
        for hash_type in cls:
            if hash_type.hex_length == len(value):
                return hash_type

        msg = f"unsupported digest length {len(value)}"
        raise InvalidHashError(msg, value)

    @classmethod
    def from_prefix(cls, prefix: str) -> HashType:
        """Map a ``sha1``/``md5``/... prefix to its algorithm.

        Raises:
            InvalidHashError: If the prefix names no supported algorithm.

        """
        try:
            return cls(prefix.strip().lower())
        except ValueError as e:
            msg = f"unsupported algorithm prefix '{prefix}'"
            raise InvalidHashError(msg) from e

    def new_digest(self) -> hashlib._Hash:
        """Create a fresh hashlib object for this algorithm."""
        return hashlib.new(self.value)


@dataclass(frozen=True, slots=True)
class Hash:
    """Checksum value with its algorithm.

    Attributes:
        value: Lowercase hex digest.
        hash_type: Algorithm the digest was produced with.

    """

    value: str
    hash_type: HashType

    def __post_init__(self) -> None:
        """Validate and normalize the digest."""
        if not self.value or not set(self.value) <= HEX_CHARACTERS:
            msg = "digest must be a non-empty hex string"
            raise InvalidHashError(msg, self.value)

        if len(self.value) != self.hash_type.hex_length:
            msg = (
                f"{self.hash_type.value} digest must be "
                f"{self.hash_type.hex_length} characters, "
                f"got {len(self.value)}"
            )
            raise InvalidHashError(msg, self.value)

        object.__setattr__(self, "value", self.value.lower())

    def __str__(self) -> str:
        """Render the digest with its algorithm prefix."""
        return f"{self.hash_type.prefix}{self.value}"

    @classmethod
    def from_hex(cls, value: str) -> Hash:
        """Build a hash from a bare hex digest, inferring the algorithm.

        Raises:
            InvalidHashError: If the digest has an unknown length or is not
                hex.

        """
        return cls(value, HashType.from_hex(value))

    @classmethod
    def parse(cls, text: str) -> Hash:
        """Parse the display form produced by ``str(hash)``.

        Accepts ``sha512:...``, ``sha1:...``, ``md5:...``, ``sha256:...`` and
        bare hex. When a prefix is present it must agree with the length.

        Raises:
            InvalidHashError: If the text is not a valid hash.

        """
        text = text.strip()
        prefix, separator, digest = text.rpartition(":")
        if not separator:
            return cls.from_hex(text)
        return cls(digest, HashType.from_prefix(prefix))

    @classmethod
    def compute(
        cls,
        reader: BinaryIO,
        hash_type: HashType,
        chunk_size: int = CHUNK_SIZE,
    ) -> Hash:
        """Stream a binary reader through the digest in fixed-size chunks.

        Args:
            reader: Binary file-like object positioned at the start of data.
            hash_type: Algorithm to use.
            chunk_size: Bytes read per iteration.

        Returns:
            Hash of everything the reader yields.

        """
        digest = hash_type.new_digest()
        for chunk in iter(lambda: reader.read(chunk_size), b""):
            digest.update(chunk)
        return cls(digest.hexdigest(), hash_type)

    @classmethod
    def compute_file(
        cls,
        path: Path,
        hash_type: HashType,
        chunk_size: int = CHUNK_SIZE,
    ) -> Hash:
        """Compute the hash of a file on disk."""
        with path.open("rb") as f:
            return cls.compute(f, hash_type, chunk_size)
