"""Tests for Digest header extraction."""

import base64
import hashlib

import pytest

from manifest_hash.core.formats.headers import parse_digest_header
from manifest_hash.exceptions import InvalidHashError

PAYLOAD = b"artifact"


def encoded(algorithm: str) -> str:
    """Base64 digest of the payload."""
    return base64.b64encode(hashlib.new(algorithm, PAYLOAD).digest()).decode()


class TestParseDigestHeader:
    """Test cases for parse_digest_header."""

    def test_sha256_preferred(self):
        """Test SHA-256 wins over weaker digests."""
        headers = {
            "Digest": (
                f"MD5={encoded('md5')}, SHA={encoded('sha1')}, "
                f"SHA-256={encoded('sha256')}"
            )
        }

        result = parse_digest_header(headers)

        assert result == hashlib.sha256(PAYLOAD).hexdigest()

    def test_sha_before_md5(self):
        """Test SHA is used when there is no SHA-256."""
        headers = {"Digest": f"md5={encoded('md5')},sha={encoded('sha1')}"}
        assert parse_digest_header(headers) == hashlib.sha1(
            PAYLOAD
        ).hexdigest()

    def test_header_name_is_case_insensitive(self):
        """Test lowercase header names are found."""
        headers = {"digest": f"MD5={encoded('md5')}"}
        assert parse_digest_header(headers) == hashlib.md5(
            PAYLOAD
        ).hexdigest()

    @pytest.mark.parametrize(
        "headers",
        [{}, {"Digest": ""}, {"Digest": "UNIXsum=30637"}],
    )
    def test_missing_digest_returns_none(self, headers):
        """Test no known digest yields None."""
        assert parse_digest_header(headers) is None

    def test_invalid_base64_raises(self):
        """Test a corrupt digest value is an invalid hash."""
        with pytest.raises(InvalidHashError):
            parse_digest_header({"Digest": "SHA-256=***"})
