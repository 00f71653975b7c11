"""Selection of the checksum strategy for a manifest.

Exactly one :class:`HashMode` applies to a resolution. It is derived from the
manifest every time and never stored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from manifest_hash.constants import FOSSHUB_REGEX, SOURCEFORGE_REGEX
from manifest_hash.exceptions import HashModeError
from manifest_hash.logger import get_logger

if TYPE_CHECKING:
    from manifest_hash.domain.manifest import (
        Architecture,
        AutoupdateArchConfig,
        HashExtraction,
        Manifest,
    )

logger = get_logger(__name__)

_FOSSHUB = re.compile(FOSSHUB_REGEX)
_SOURCEFORGE = re.compile(SOURCEFORGE_REGEX)


class HashModeKind(Enum):
    """Checksum strategies."""

    HASH_URL = "hash_url"
    DOWNLOAD = "download"
    EXTRACT = "extract"
    JSON = "json"
    XPATH = "xpath"
    FOSSHUB = "fosshub"
    SOURCEFORGE = "sourceforge"
    METALINK = "metalink"
    RDF = "rdf"


# Values of ``hash.mode`` that pick a strategy without further inspection
_EXPLICIT_MODES = {
    "download": HashModeKind.DOWNLOAD,
    "fosshub": HashModeKind.FOSSHUB,
    "sourceforge": HashModeKind.SOURCEFORGE,
    "metalink": HashModeKind.METALINK,
    "rdf": HashModeKind.RDF,
}

# Values of ``hash.mode`` that defer to the regex/jsonpath/xpath fields
_FIELD_MODES = frozenset({"extract", "json", "xpath"})


def match_fosshub(url: str) -> re.Match[str] | None:
    """Match a Fosshub download URL."""
    return _FOSSHUB.search(url)


def match_sourceforge(url: str) -> re.Match[str] | None:
    """Match a Sourceforge project download URL."""
    return _SOURCEFORGE.search(url)


@dataclass(frozen=True, slots=True)
class HashMode:
    """A checksum strategy plus its location expression.

    Attributes:
        kind: The strategy.
        expression: Regex, JSON-path or XPath for the extracting kinds.

    """

    kind: HashModeKind
    expression: str | None = None

    @classmethod
    def extract(cls, regex: str | None) -> HashMode:
        """Text extraction with ``regex`` (the default pattern if None)."""
        return cls(HashModeKind.EXTRACT, regex)

    @classmethod
    def json(cls, path: str) -> HashMode:
        """JSON-path extraction."""
        return cls(HashModeKind.JSON, path)

    @classmethod
    def xpath(cls, path: str) -> HashMode:
        """XPath extraction."""
        return cls(HashModeKind.XPATH, path)

    @classmethod
    def from_manifest(
        cls, manifest: Manifest, arch: Architecture | None = None
    ) -> HashMode | None:
        """Decide how the checksum for ``manifest`` is obtained.

        Fosshub and Sourceforge download URLs are recognised first; their
        pages are scraped the same way whatever the autoupdate section says.
        Otherwise the merged autoupdate ``hash`` setting decides.

        Args:
            manifest: Manifest to inspect.
            arch: Target architecture (the host one if None).

        Returns:
            The strategy, or None when the manifest gives no way to find
            a checksum.

        Raises:
            HashModeError: If the setting is ambiguous or unknown.

        """
        url = manifest.install_url(arch)
        if url is not None:
            if match_fosshub(url):
                logger.debug("🔍 %s: Fosshub url", manifest.name)
                return cls(HashModeKind.FOSSHUB)
            if match_sourceforge(url):
                logger.debug("🔍 %s: Sourceforge url", manifest.name)
                return cls(HashModeKind.SOURCEFORGE)

        config = manifest.autoupdate_config_for(arch)
        if config is None:
            return None
        return cls.from_autoupdate_config(config)

    @classmethod
    def from_autoupdate_config(
        cls, config: AutoupdateArchConfig
    ) -> HashMode | None:
        """Decide the strategy from merged autoupdate settings alone."""
        hash_config = config.hash
        if hash_config is None:
            return None
        if isinstance(hash_config, str):
            return cls(HashModeKind.DOWNLOAD)
        if isinstance(hash_config, tuple):
            msg = "a list of hash extractions has no defined precedence"
            raise HashModeError(msg)
        return cls.from_hash_extraction(hash_config)

    @classmethod
    def from_hash_extraction(cls, extraction: HashExtraction) -> HashMode:
        """Decide the strategy from a ``hash`` object."""
        if extraction.mode:
            mode = extraction.mode.strip().lower()
            if mode in _EXPLICIT_MODES:
                return cls(_EXPLICIT_MODES[mode])
            if mode not in _FIELD_MODES:
                msg = f"unknown hash mode '{extraction.mode}'"
                raise HashModeError(msg)

        if extraction.text_regex:
            return cls.extract(extraction.text_regex)
        if extraction.json_path:
            return cls.json(extraction.json_path)
        if extraction.xpath:
            return cls.xpath(extraction.xpath)

        return cls(HashModeKind.HASH_URL)
