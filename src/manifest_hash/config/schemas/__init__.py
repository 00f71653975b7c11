"""JSON Schema validation for package manifests.

Usage:
    from manifest_hash.config.schemas import validate_manifest

    validate_manifest(orjson.loads(text), "7zip")
"""

from manifest_hash.config.schemas.validator import (
    ManifestValidator,
    validate_manifest,
)

__all__ = ["ManifestValidator", "validate_manifest"]
