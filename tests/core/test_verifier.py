"""Tests for artifact verification."""

import hashlib
import logging

import pytest

from manifest_hash.core.verifier import Verifier, format_bytes
from manifest_hash.domain.hashes import Hash, HashType
from manifest_hash.exceptions import HashMismatchError

CONTENT = b"release artifact\n" * 100


@pytest.fixture
def artifact(tmp_path):
    """A downloaded file on disk."""
    path = tmp_path / "tool-1.2.3.zip"
    path.write_bytes(CONTENT)
    return path


class TestFormatBytes:
    """Test cases for format_bytes."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0.0 B"),
            (1023, "1023.0 B"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (1024**3, "1.0 GB"),
        ],
    )
    def test_units(self, size, expected):
        """Test binary multiples are used."""
        assert format_bytes(size) == expected

    def test_negative_raises(self):
        """Test negative sizes are rejected."""
        with pytest.raises(ValueError, match="negative"):
            format_bytes(-1)


class TestVerifier:
    """Test cases for Verifier."""

    def test_compute_hash_defaults_to_sha256(self, artifact):
        """Test SHA256 is used when no algorithm is given."""
        result = Verifier(artifact).compute_hash()

        assert result.hash_type is HashType.SHA256
        assert result.value == hashlib.sha256(CONTENT).hexdigest()

    def test_verify_uses_expected_algorithm(self, artifact):
        """Test the file is hashed with the algorithm of the expected hash."""
        expected = Hash.from_hex(hashlib.md5(CONTENT).hexdigest())

        actual = Verifier(artifact, chunk_size=64).verify(expected)

        assert actual == expected

    def test_verify_mismatch_raises(self, artifact, caplog):
        """Test a mismatch raises with both hashes and logs an error."""
        expected = Hash.from_hex("0" * 64)

        with (
            caplog.at_level(logging.ERROR),
            pytest.raises(HashMismatchError) as exc_info,
        ):
            Verifier(artifact).verify(expected)

        assert exc_info.value.expected == "0" * 64
        assert exc_info.value.actual == hashlib.sha256(CONTENT).hexdigest()
        assert exc_info.value.target == str(artifact)
        assert "Hash verification FAILED" in caplog.text

    def test_missing_file(self, tmp_path, caplog):
        """Test a missing file is reported and cannot be hashed."""
        with caplog.at_level(logging.WARNING):
            verifier = Verifier(tmp_path / "missing.zip")

        assert "File does not exist" in caplog.text
        with pytest.raises(FileNotFoundError):
            verifier.compute_hash()

    @pytest.mark.asyncio
    async def test_verify_async(self, artifact):
        """Test verification off the event loop."""
        expected = Hash.from_hex(hashlib.sha1(CONTENT).hexdigest())

        assert await Verifier(artifact).verify_async(expected) == expected
