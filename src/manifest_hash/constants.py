"""Centralized constants module for manifest-hash.

This module is the single source of truth for constants shared across the
package. Constants are grouped by concern and annotated with
``typing.Final``.

Usage:
    from manifest_hash.constants import CHUNK_SIZE
"""

from typing import Final

# =============================================================================
# Configuration Constants
# =============================================================================

CONFIG_VERSION: Final[str] = "1.0.0"
CONFIG_FILE_NAME: Final[str] = "settings.conf"
CONFIG_DIR_NAME: Final[str] = "manifest-hash"
DEFAULT_CONFIG_SUBDIR: Final[str] = ".config"

# Environment overrides (mainly used by the test-suite)
ENV_CONFIG_DIR: Final[str] = "MANIFEST_HASH_CONFIG_DIR"
ENV_LOG_DIR: Final[str] = "MANIFEST_HASH_LOG_DIR"

DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "WARNING"
DEFAULT_MAX_CONCURRENT_LOOKUPS: Final[int] = 8
DEFAULT_RETRY_ATTEMPTS: Final[int] = 3
DEFAULT_TIMEOUT_SECONDS: Final[int] = 10

SECTION_DEFAULT: Final[str] = "DEFAULT"
SECTION_NETWORK: Final[str] = "network"
SECTION_DIRECTORY: Final[str] = "directory"

KEY_CONFIG_VERSION: Final[str] = "config_version"
KEY_LOG_LEVEL: Final[str] = "log_level"
KEY_CONSOLE_LOG_LEVEL: Final[str] = "console_log_level"
KEY_MAX_CONCURRENT_LOOKUPS: Final[str] = "max_concurrent_lookups"
KEY_RETRY_ATTEMPTS: Final[str] = "retry_attempts"
KEY_TIMEOUT_SECONDS: Final[str] = "timeout_seconds"
KEY_LOGS: Final[str] = "logs"

DIRECTORY_KEYS: Final[tuple[str, ...]] = (KEY_LOGS,)

# =============================================================================
# Logging Constants
# =============================================================================

LOG_ROOT_NAME: Final[str] = "manifest_hash"
LOG_FILE_NAME: Final[str] = "manifest-hash.log"
LOG_ROTATION_THRESHOLD_BYTES: Final[int] = 1024 * 1024  # 1 MB
LOG_BACKUP_COUNT: Final[int] = 3

LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}

# =============================================================================
# Hashing Constants
# =============================================================================

# Read size used when streaming artifacts through a digest
CHUNK_SIZE: Final[int] = 8192

# Hex digest length for each supported algorithm
HASH_HEX_LENGTHS: Final[dict[str, int]] = {
    "sha512": 128,
    "sha256": 64,
    "sha1": 40,
    "md5": 32,
}

# Raw digest sizes in bytes, used to recognise base64 encoded digests
DIGEST_BYTE_LENGTHS: Final[frozenset[int]] = frozenset({16, 20, 32, 64})

HEX_CHARACTERS: Final[frozenset[str]] = frozenset("0123456789abcdefABCDEF")

# =============================================================================
# Extraction Constants
# =============================================================================

# Regex fragments available to extraction patterns as $md5, $sha1, ...
REGEX_FRAGMENTS: Final[dict[str, str]] = {
    "md5": r"([a-fA-F0-9]{32})",
    "sha1": r"([a-fA-F0-9]{40})",
    "sha256": r"([a-fA-F0-9]{64})",
    "sha512": r"([a-fA-F0-9]{128})",
    "checksum": r"([a-fA-F0-9]{32,128})",
    "base64": r"([a-zA-Z0-9+\/=]{24,88})",
}

DEFAULT_TEXT_REGEX: Final[str] = r"^\s*([a-fA-F0-9]+)\s*$"

# Hash sits on the same line as the file name, optionally followed by a size
FILENAME_FALLBACK_REGEX: Final[str] = (
    r"([a-fA-F0-9]{32,128})[\x20\t]+.*$basename(?:[\x20\t]+\d+)?"
)
METALINK_FALLBACK_REGEX: Final[str] = r"<hash[^>]+>([a-fA-F0-9]{64})"

BASE64_REGEX: Final[str] = (
    r"^(?:[A-Za-z0-9+\/]{4})*"
    r"(?:[A-Za-z0-9+\/]{2}==|[A-Za-z0-9+\/]{3}=|[A-Za-z0-9+\/]{4})$"
)

FOSSHUB_REGEX: Final[str] = (
    r"^(?:.*fosshub.com\/).*(?:\/|\?dwl=)(?P<filename>.*)$"
)
# ``file`` is greedy, so a trailing ``/download`` stays part of it.
SOURCEFORGE_REGEX: Final[str] = (
    r"(?:downloads\.)?sourceforge.net\/projects?\/(?P<project>[^\/]+)\/"
    r"(?:files\/)?(?P<file>.*)"
)

FOSSHUB_HASH_REGEX_SUFFIX: Final[str] = r'.*?"sha256":"([a-fA-F0-9]{64})"'
SOURCEFORGE_HASH_REGEX: Final[str] = (
    r'"$basename":.*?"sha1":\s*"([a-fA-F0-9]{40})"'
)
SOURCEFORGE_FILES_URL: Final[str] = (
    "https://sourceforge.net/projects/{project}/files/{file}"
)

METALINK_SUFFIX: Final[str] = ".meta4"

# RFC 3230 digest algorithms, in preference order
DIGEST_HEADER_ALGORITHMS: Final[tuple[str, ...]] = ("SHA-256", "SHA", "MD5")

# =============================================================================
# Network Constants
# =============================================================================

CONTENT_PREVIEW_MAX: Final[int] = 200
