"""Checksum extraction from JSON documents with JSON-path queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse

from manifest_hash.core.substitutions import substitute
from manifest_hash.exceptions import InvalidExpressionError, JsonParseError
from manifest_hash.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger(__name__)


def parse_json(
    source: str | bytes,
    substitutions: Mapping[str, str],
    expression: str,
) -> str | None:
    """Evaluate a JSON-path query and return the first scalar it selects.

    Variables are expanded into the query without escaping, so filters such
    as ``$[?(@.name == '$basename')].sha256`` work.

    Args:
        source: JSON document.
        substitutions: Template variables for the query.
        expression: JSON-path template.

    Returns:
        The selected value as a string, or None if nothing was selected.

    Raises:
        JsonParseError: If the document is not valid JSON.
        InvalidExpressionError: If the query is not valid JSON-path.

    """
    try:
        document = orjson.loads(source)
    except orjson.JSONDecodeError as e:
        raise JsonParseError(str(e)) from e

    path = substitute(expression, substitutions)
    try:
        query = parse(path)
    except JSONPathError as e:
        raise InvalidExpressionError(str(e), path) from e

    for match in query.find(document):
        value = match.value
        if value is None or isinstance(value, dict | list):
            continue
        logger.debug("JSON path %s matched %s", path, match.full_path)
        return str(value)

    return None
