"""Checksum extraction from plain text with regular expressions.

Handles checksum files (``SHA256SUMS``, ``*.sha256``), HTML download pages
and anything else a pattern can be written for. Checksums published in
base64 are converted to hex.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import TYPE_CHECKING

from manifest_hash.constants import (
    BASE64_REGEX,
    DEFAULT_TEXT_REGEX,
    DIGEST_BYTE_LENGTHS,
    FILENAME_FALLBACK_REGEX,
    HEX_CHARACTERS,
    METALINK_FALLBACK_REGEX,
)
from manifest_hash.core.substitutions import substitute_regex, to_python_regex
from manifest_hash.exceptions import InvalidExpressionError
from manifest_hash.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger(__name__)

_BASE64 = re.compile(BASE64_REGEX)
_WHITESPACE = re.compile(r"\s")


def compile_pattern(
    template: str, substitutions: Mapping[str, str]
) -> re.Pattern[str]:
    """Expand a regex template and compile it.

    Raises:
        InvalidExpressionError: If the expanded pattern is not a valid regex.

    """
    pattern = substitute_regex(to_python_regex(template), substitutions)
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidExpressionError(str(e), pattern) from e


def _first_capture(pattern: re.Pattern[str], source: str) -> str | None:
    if pattern.groups < 1:
        return None
    match = pattern.search(source)
    if match is None:
        return None
    return match.group(1) or None


def _is_hex(value: str) -> bool:
    return set(value) <= HEX_CHARACTERS


def decode_base64_digest(value: str) -> str:
    """Convert a base64 encoded digest to hex, leaving hex digests alone.

    A value is decoded when it is valid base64 and either contains non-hex
    characters or decodes to the size of a known digest (16, 20, 32 or 64
    bytes). Values that fail to decode are returned unchanged.
    """
    if not _BASE64.match(value):
        return value

    try:
        decoded = base64.b64decode(value, validate=True)
    except binascii.Error:
        return value

    if _is_hex(value) and len(decoded) not in DIGEST_BYTE_LENGTHS:
        return value

    logger.debug("Decoded base64 digest (%d bytes)", len(decoded))
    return decoded.hex()


def parse_text(
    source: str,
    substitutions: Mapping[str, str],
    expression: str | None = None,
) -> str | None:
    """Find a checksum in text.

    The first match of the pattern is used and its first group is the
    checksum, with all whitespace removed. When the pattern has no group or
    does not match, two fallbacks are tried in order: a hex digest on the
    same line as the artifact's ``$basename``, then a 64 character digest in
    a metalink ``<hash>`` element.

    Args:
        source: Text of the checksum source.
        substitutions: Template variables for the pattern.
        expression: Regex template; ``^\\s*([a-fA-F0-9]+)\\s*$`` when empty.

    Returns:
        Lowercase checksum, or None if nothing matched.

    Raises:
        InvalidExpressionError: If the pattern does not compile.

    """
    pattern = compile_pattern(expression or DEFAULT_TEXT_REGEX, substitutions)

    value = _first_capture(pattern, source)
    if value:
        value = _WHITESPACE.sub("", value)
        if value:
            return decode_base64_digest(value).lower()

    for fallback in (FILENAME_FALLBACK_REGEX, METALINK_FALLBACK_REGEX):
        value = _first_capture(
            compile_pattern(fallback, substitutions), source
        )
        if value:
            logger.debug("Checksum found by fallback pattern %s", fallback)
            return value.lower()

    return None
