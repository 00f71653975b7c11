"""JSON Schema validation for package manifests."""

from pathlib import Path
from typing import Any

import orjson
from jsonschema import Draft7Validator, ValidationError
from jsonschema.exceptions import best_match

from manifest_hash.exceptions import ManifestParseError
from manifest_hash.logger import get_logger

logger = get_logger(__name__)

SCHEMA_DIR = Path(__file__).parent
MANIFEST_SCHEMA_PATH = SCHEMA_DIR / "manifest.schema.json"


class ManifestValidator:
    """Validates decoded manifests against the manifest schema."""

    def __init__(self, schema_path: Path = MANIFEST_SCHEMA_PATH) -> None:
        """Initialize validator with the loaded schema.

        Args:
            schema_path: Path to the JSON schema file

        """
        self._validator = Draft7Validator(self._load_schema(schema_path))

    @staticmethod
    def _load_schema(schema_path: Path) -> dict[str, Any]:
        """Load JSON schema from file.

        Raises:
            FileNotFoundError: If schema file doesn't exist
            ValueError: If schema JSON is invalid

        """
        if not schema_path.exists():
            msg = f"Schema file not found: {schema_path}"
            raise FileNotFoundError(msg)

        try:
            with schema_path.open("rb") as f:
                return orjson.loads(f.read())  # type: ignore[no-any-return]
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON in schema file {schema_path}: {e}"
            raise ValueError(msg) from e

    @staticmethod
    def _format_validation_error(error: ValidationError) -> str:
        """Format a validation error into a one-line message."""
        path = (
            ".".join(str(p) for p in error.absolute_path)
            if error.absolute_path
            else "root"
        )

        message = error.message
        if error.validator == "required":
            missing = (
                error.message.split("'")[1]
                if "'" in error.message
                else "unknown"
            )
            message = f"Missing required field: '{missing}'"
        elif error.validator == "additionalProperties":
            message = f"Unknown key. {error.message}"
        elif error.validator == "type":
            expected_type = error.validator_value
            actual = type(error.instance).__name__
            message = f"Expected type '{expected_type}', got '{actual}'"

        return f"{message} (at '{path}')"

    def validate(self, data: Any, name: str | None = None) -> None:
        """Validate a decoded manifest.

        Args:
            data: Decoded manifest JSON
            name: Package name, used as the error target

        Raises:
            ManifestParseError: If the manifest does not match the schema

        """
        errors = list(self._validator.iter_errors(data))
        if errors:
            best_error = best_match(errors)
            raise ManifestParseError(
                self._format_validation_error(best_error), name
            )

        logger.debug("Manifest validation passed: %s", name or "unknown")


_validator: ManifestValidator | None = None


def get_validator() -> ManifestValidator:
    """Get or create the shared validator instance."""
    global _validator
    if _validator is None:
        _validator = ManifestValidator()
    return _validator


def validate_manifest(data: Any, name: str | None = None) -> None:
    """Validate a decoded manifest (convenience function).

    Raises:
        ManifestParseError: If the manifest does not match the schema

    """
    get_validator().validate(data, name)
