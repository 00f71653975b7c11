"""Checksum extraction from HTTP ``Digest`` response headers (RFC 3230)."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

from manifest_hash.constants import DIGEST_HEADER_ALGORITHMS
from manifest_hash.exceptions import InvalidHashError

if TYPE_CHECKING:
    from collections.abc import Mapping


def _digest_header(headers: Mapping[str, str]) -> str | None:
    for name, value in headers.items():
        if name.lower() == "digest":
            return value
    return None


def parse_digest_header(headers: Mapping[str, str]) -> str | None:
    """Read the strongest digest from a ``Digest`` header as hex.

    ``SHA-256`` is preferred over ``SHA`` over ``MD5``.

    Returns:
        Lowercase hex digest, or None if the header has no known digest.

    Raises:
        InvalidHashError: If the chosen digest is not valid base64.

    """
    header = _digest_header(headers)
    if not header:
        return None

    digests: dict[str, str] = {}
    for item in header.split(","):
        algorithm, separator, value = item.strip().partition("=")
        if separator and value:
            digests.setdefault(algorithm.strip().upper(), value.strip())

    for algorithm in DIGEST_HEADER_ALGORITHMS:
        encoded = digests.get(algorithm)
        if encoded is None:
            continue
        try:
            return base64.b64decode(encoded, validate=True).hex()
        except binascii.Error as e:
            msg = f"{algorithm} digest is not valid base64"
            raise InvalidHashError(msg, encoded) from e

    return None
