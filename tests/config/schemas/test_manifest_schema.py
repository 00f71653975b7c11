"""Tests for manifest schema validation."""

import pytest

from manifest_hash.config.schemas import ManifestValidator, validate_manifest
from manifest_hash.exceptions import ManifestParseError


def test_valid_manifest(manifest_data):
    """Test validation passes for a typical manifest."""
    validate_manifest(manifest_data, "tool")


def test_hash_array_with_strings_and_objects(manifest_data):
    """Test autoupdate hash lists may mix URLs and extraction objects."""
    manifest_data["autoupdate"]["hash"] = [
        "$url.sha256",
        {"url": "$url.json", "jsonpath": "$.sha256"},
    ]
    validate_manifest(manifest_data, "tool")


def test_missing_version(manifest_data):
    """Test validation fails without a version."""
    del manifest_data["version"]
    with pytest.raises(ManifestParseError) as exc_info:
        validate_manifest(manifest_data, "tool")
    assert "version" in str(exc_info.value)
    assert exc_info.value.target == "tool"


def test_unknown_architecture(manifest_data):
    """Test architecture keys are limited to the known ones."""
    manifest_data["architecture"] = {"sparc": {"url": "https://x"}}
    with pytest.raises(ManifestParseError) as exc_info:
        validate_manifest(manifest_data, "tool")
    assert "sparc" in str(exc_info.value)


def test_autoupdate_architecture_url_type(manifest_data):
    """Test nested autoupdate settings are checked too."""
    manifest_data["autoupdate"]["architecture"] = {"arm64": {"url": 1}}
    with pytest.raises(ManifestParseError) as exc_info:
        validate_manifest(manifest_data, "tool")
    assert "autoupdate.architecture.arm64.url" in str(exc_info.value)


def test_missing_schema_file(tmp_path):
    """Test a missing schema file is reported at construction."""
    with pytest.raises(FileNotFoundError):
        ManifestValidator(tmp_path / "missing.schema.json")
