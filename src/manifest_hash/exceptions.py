"""Exception classes for manifest-hash operations.

Each distinct failure cause has its own class so callers can decide per
package whether to abort, skip or report. Nothing in the core swallows these.
"""


class ManifestHashError(Exception):
    """Base exception for manifest-hash operations."""

    error_prefix: str = "Operation failed"

    def __init__(self, message: str, target: str | None = None) -> None:
        """Initialize error with message and optional target.

        Args:
            message: Error message describing the failure.
            target: Optional name of the manifest, URL or file that failed.

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


# =============================================================================
# Configuration absence
# =============================================================================


class MissingAutoupdateConfigError(ManifestHashError):
    """Raised when a manifest has no autoupdate section."""

    error_prefix = "Missing autoupdate config"


class MissingUrlError(ManifestHashError):
    """Raised when a download or hash extraction URL is missing."""

    error_prefix = "Missing url"


class MissingHashExtractionError(ManifestHashError):
    """Raised when no hash extraction strategy is configured."""

    error_prefix = "Missing hash extraction"


class HashModeError(ManifestHashError):
    """Raised when the hash mode cannot be determined from the config."""

    error_prefix = "Cannot determine hash mode"


# =============================================================================
# Vendor pattern mismatch
# =============================================================================


class VendorPatternError(ManifestHashError):
    """Raised when a vendor URL lacks the captures its handler needs."""

    error_prefix = "Vendor url did not match"


class MissingFosshubCapturesError(VendorPatternError):
    """Raised when the Fosshub pattern does not capture a file name."""

    error_prefix = "Fosshub regex failed to match"


class MissingSourceforgeCapturesError(VendorPatternError):
    """Raised when the Sourceforge pattern misses project or file."""

    error_prefix = "Sourceforge regex failed to match"


# =============================================================================
# Extraction failure
# =============================================================================


class HashNotFoundError(ManifestHashError):
    """Raised when an extractor ran but found no hash."""

    error_prefix = "Hash not found"


class InvalidHashError(ManifestHashError):
    """Raised when a hash has an unknown length or non-hex characters."""

    error_prefix = "Invalid hash"


class InvalidExpressionError(ManifestHashError):
    """Raised when a regex, JSON-path or XPath expression is invalid."""

    error_prefix = "Invalid extraction expression"


class NoRemoteChecksumError(ManifestHashError):
    """Raised when the artifact itself must be hashed (download mode)."""

    error_prefix = "No remote checksum available"


# =============================================================================
# Transport failure
# =============================================================================


class FetchError(ManifestHashError):
    """Base class for failures fetching a checksum source."""

    error_prefix = "Failed to fetch"


class TransportError(FetchError):
    """Raised when the request could not be completed."""

    error_prefix = "Network error"


class HTTPStatusError(FetchError):
    """Raised when the server answered with a non-success status."""

    error_prefix = "HTTP error"

    def __init__(
        self, status: int, message: str, target: str | None = None
    ) -> None:
        """Initialize error with the response status.

        Args:
            status: HTTP status code returned by the server.
            message: Error message describing the failure.
            target: URL that was requested.

        """
        super().__init__(message, target)
        self.status = status


# =============================================================================
# Parse failure
# =============================================================================


class SourceParseError(ManifestHashError):
    """Base class for malformed checksum sources."""

    error_prefix = "Malformed source"


class JsonParseError(SourceParseError):
    """Raised when a JSON checksum source cannot be parsed."""

    error_prefix = "Invalid JSON"


class XmlParseError(SourceParseError):
    """Raised when an XML or HTML checksum source cannot be parsed."""

    error_prefix = "Invalid XML"


class RdfParseError(SourceParseError):
    """Raised when an RDF checksum source cannot be parsed."""

    error_prefix = "Invalid RDF"


# =============================================================================
# Artifact verification
# =============================================================================


class HashMismatchError(ManifestHashError):
    """Raised when a computed artifact hash differs from the expected one."""

    error_prefix = "Hash mismatch"

    def __init__(
        self, expected: str, actual: str, target: str | None = None
    ) -> None:
        """Initialize error with both hashes.

        Args:
            expected: Authoritative hash, in display form.
            actual: Hash computed from the artifact, in display form.
            target: Artifact that failed verification.

        """
        super().__init__(f"expected {expected}, got {actual}", target)
        self.expected = expected
        self.actual = actual


# =============================================================================
# Manifests and references
# =============================================================================


class ManifestParseError(ManifestHashError):
    """Raised when a manifest document is not valid."""

    error_prefix = "Could not parse manifest"


class ManifestNotFoundError(ManifestHashError):
    """Raised when no bucket provides the requested manifest."""

    error_prefix = "Manifest not found"


class BucketNotFoundError(ManifestHashError):
    """Raised when a reference names an unknown bucket."""

    error_prefix = "Bucket not found"


class InvalidReferenceError(ManifestHashError):
    """Raised when a package reference cannot be parsed."""

    error_prefix = "Invalid package reference"
