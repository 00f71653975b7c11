"""Tests for JSON-path checksum extraction."""

import orjson
import pytest

from manifest_hash.core.formats.json_path import parse_json
from manifest_hash.core.substitutions import SubstitutionMap
from manifest_hash.exceptions import InvalidExpressionError, JsonParseError

SHA256_HEX = "ab" * 32


@pytest.fixture
def substitutions():
    """Variables for a release artifact."""
    return SubstitutionMap.for_version("2.1.0").with_url(
        "https://example.com/dl/tool-2.1.0.zip"
    )


@pytest.fixture
def release_document():
    """A release listing in the shape code hosts publish."""
    return orjson.dumps(
        {
            "version": "2.1.0",
            "assets": [
                {"name": "tool-2.1.0.tar.gz", "sha256": None},
                {"name": "tool-2.1.0.zip", "sha256": SHA256_HEX},
            ],
            "build": 42,
            "v2_1_0": {"sha256": SHA256_HEX},
        }
    )


class TestParseJson:
    """Test cases for parse_json."""

    def test_simple_path(self, release_document, substitutions):
        """Test a direct path selects its value."""
        result = parse_json(
            release_document, substitutions, "$.assets[1].sha256"
        )
        assert result == SHA256_HEX

    def test_null_and_container_values_are_skipped(
        self, release_document, substitutions
    ):
        """Test the first scalar value is returned."""
        result = parse_json(
            release_document, substitutions, "$.assets[*].sha256"
        )
        assert result == SHA256_HEX

    def test_variables_are_substituted(self, release_document, substitutions):
        """Test version variables are expanded inside the query."""
        result = parse_json(
            release_document, substitutions, "$.v$underscoreVersion.sha256"
        )
        assert result == SHA256_HEX

    def test_non_string_scalars_are_stringified(
        self, release_document, substitutions
    ):
        """Test numbers are returned as strings."""
        assert parse_json(release_document, substitutions, "$.build") == "42"

    def test_object_selection_returns_none(
        self, release_document, substitutions
    ):
        """Test selecting only an object yields nothing."""
        assert parse_json(release_document, substitutions, "$.assets") is None

    def test_no_match_returns_none(self, release_document, substitutions):
        """Test a path that selects nothing."""
        assert parse_json(release_document, substitutions, "$.nope") is None

    def test_invalid_json_raises(self, substitutions):
        """Test a document that is not JSON."""
        with pytest.raises(JsonParseError):
            parse_json("<html></html>", substitutions, "$.sha256")

    def test_invalid_path_raises(self, release_document, substitutions):
        """Test a query that does not parse."""
        with pytest.raises(InvalidExpressionError):
            parse_json(release_document, substitutions, "$[")
