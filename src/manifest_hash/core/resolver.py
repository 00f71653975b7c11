"""Resolution of authoritative checksums for manifests.

The resolver picks a :class:`HashMode`, builds the source URL and pattern
from the manifest's templates, fetches the source and hands it to the
matching extractor. Fosshub and Sourceforge are rewritten into plain text
extraction against their file listing pages.

Nothing here retries: a failed fetch is reported to the caller straight
away. Retries of dropped connections happen inside :class:`SourceFetcher`.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from manifest_hash.constants import (
    DEFAULT_MAX_CONCURRENT_LOOKUPS,
    FOSSHUB_HASH_REGEX_SUFFIX,
    METALINK_SUFFIX,
    SOURCEFORGE_FILES_URL,
    SOURCEFORGE_HASH_REGEX,
)
from manifest_hash.core.formats import (
    parse_digest_header,
    parse_json,
    parse_rdf,
    parse_text,
    parse_xml,
)
from manifest_hash.core.substitutions import (
    SubstitutionMap,
    strip_filename,
    strip_fragment,
    substitute,
)
from manifest_hash.domain.hash_mode import (
    HashMode,
    HashModeKind,
    match_fosshub,
    match_sourceforge,
)
from manifest_hash.domain.hashes import Hash
from manifest_hash.domain.manifest import Architecture, HashExtraction
from manifest_hash.exceptions import (
    HashNotFoundError,
    HTTPStatusError,
    MissingAutoupdateConfigError,
    MissingFosshubCapturesError,
    MissingHashExtractionError,
    MissingSourceforgeCapturesError,
    MissingUrlError,
    NoRemoteChecksumError,
)
from manifest_hash.logger import get_logger

if TYPE_CHECKING:
    from manifest_hash.core.fetch import FetchedSource, SourceFetcher
    from manifest_hash.domain.manifest import AutoupdateArchConfig, Manifest

logger = get_logger(__name__)

Extractor = Callable[
    ["FetchedSource", SubstitutionMap, str | None], str | None
]


def _extract_text(
    source: FetchedSource,
    substitutions: SubstitutionMap,
    expression: str | None,
) -> str | None:
    return parse_text(source.text, substitutions, expression)


def _extract_json(
    source: FetchedSource,
    substitutions: SubstitutionMap,
    expression: str | None,
) -> str | None:
    return parse_json(source.body, substitutions, expression or "")


def _extract_xpath(
    source: FetchedSource,
    substitutions: SubstitutionMap,
    expression: str | None,
) -> str | None:
    return parse_xml(source.body, substitutions, expression or "")


def _extract_rdf(
    source: FetchedSource,
    substitutions: SubstitutionMap,
    expression: str | None,
) -> str | None:
    return parse_rdf(source.body, substitutions["basename"])


def _extract_body(
    source: FetchedSource,
    substitutions: SubstitutionMap,
    expression: str | None,
) -> str | None:
    """Use the whole response body as the checksum.

    Checksum files in the ``<hex>  <filename>`` layout do not qualify;
    such sources need a ``regex`` so the text extractor picks the digest.
    """
    return source.text.strip() or None


_EXTRACTORS: dict[HashModeKind, Extractor] = {
    HashModeKind.HASH_URL: _extract_body,
    HashModeKind.EXTRACT: _extract_text,
    HashModeKind.JSON: _extract_json,
    HashModeKind.XPATH: _extract_xpath,
    HashModeKind.RDF: _extract_rdf,
}


def fosshub_source(url: str) -> tuple[str, HashMode]:
    """Source URL and pattern for a Fosshub download.

    Fosshub embeds the checksums of every file as JSON in the download page
    itself.

    Raises:
        MissingFosshubCapturesError: If no file name can be read from url.

    """
    match = match_fosshub(url)
    if match is None or not match.group("filename"):
        msg = "no file name in download url"
        raise MissingFosshubCapturesError(msg, url)

    regex = re.escape(match.group("filename")) + FOSSHUB_HASH_REGEX_SUFFIX
    return url, HashMode.extract(regex)


def sourceforge_source(url: str) -> tuple[str, HashMode]:
    """Source URL and pattern for a Sourceforge download.

    The checksums are listed as JSON in the project's file browser page for
    the directory holding the file.

    Raises:
        MissingSourceforgeCapturesError: If project or file is missing.

    """
    match = match_sourceforge(strip_fragment(url))
    if match is None or not match.group("project") or not match.group("file"):
        msg = "no project or file in download url"
        raise MissingSourceforgeCapturesError(msg, url)

    directory = strip_filename(match.group("file"))
    listing = SOURCEFORGE_FILES_URL.format(
        project=match.group("project"), file=directory
    ).rstrip("/")
    return listing, HashMode.extract(SOURCEFORGE_HASH_REGEX)


class HashResolver:
    """Finds the authoritative checksum of a manifest's download."""

    def __init__(
        self,
        fetcher: SourceFetcher,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT_LOOKUPS,
    ) -> None:
        """Initialize resolver.

        Args:
            fetcher: HTTP collaborator used for every checksum source
            max_concurrent: Resolutions run at once by get_for_apps

        """
        self.fetcher = fetcher
        self.max_concurrent = max(1, max_concurrent)

    async def get_for_app(
        self, manifest: Manifest, arch: Architecture | None = None
    ) -> Hash:
        """Resolve the checksum of the manifest's download for ``arch``.

        Args:
            manifest: Manifest to resolve
            arch: Target architecture (the host one if None)

        Returns:
            Validated checksum

        Raises:
            MissingAutoupdateConfigError: If there is no autoupdate section
            MissingUrlError: If no download or checksum url is configured
            MissingHashExtractionError: If no checksum strategy applies
            NoRemoteChecksumError: If the artifact itself must be hashed
            HashNotFoundError: If the source holds no matching checksum
            InvalidHashError: If the found checksum is malformed
            FetchError: If the source could not be fetched

        """
        arch = arch or Architecture.current()

        config = manifest.autoupdate_config_for(arch)
        if config is None:
            msg = "manifest has no autoupdate section"
            raise MissingAutoupdateConfigError(msg, manifest.name)

        url = manifest.install_url(arch)
        if url is None:
            msg = f"no download url for {arch.value}"
            raise MissingUrlError(msg, manifest.name)

        substitutions = SubstitutionMap.for_version(manifest.version).with_url(
            url
        )

        mode = HashMode.from_manifest(manifest, arch)
        if mode is None:
            msg = "autoupdate has no hash setting"
            raise MissingHashExtractionError(msg, manifest.name)

        logger.debug(
            "🔍 Resolving checksum for %s %s (%s) using %s",
            manifest.name,
            manifest.version,
            arch.value,
            mode.kind.value,
        )

        if mode.kind is HashModeKind.DOWNLOAD:
            msg = "no checksum is published, hash the downloaded file"
            raise NoRemoteChecksumError(msg, manifest.name)

        if mode.kind is HashModeKind.METALINK:
            value = await self._resolve_metalink(substitutions)
            return self._to_hash(value, manifest.name, substitutions["url"])

        if mode.kind is HashModeKind.FOSSHUB:
            source_url, mode = fosshub_source(url)
        elif mode.kind is HashModeKind.SOURCEFORGE:
            source_url, mode = sourceforge_source(url)
        else:
            source_url = self._hash_source_url(
                config, substitutions, manifest.name
            )

        source = await self.fetcher.fetch(source_url)
        value = _EXTRACTORS[mode.kind](source, substitutions, mode.expression)
        return self._to_hash(value, manifest.name, source_url)

    async def get_for_apps(
        self,
        manifests: Sequence[Manifest],
        arch: Architecture | None = None,
    ) -> list[Hash | BaseException]:
        """Resolve several manifests concurrently.

        Args:
            manifests: Manifests to resolve
            arch: Target architecture (the host one if None)

        Returns:
            One entry per manifest, in input order: the checksum or the
            exception that stopped its resolution

        """
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def resolve_one(manifest: Manifest) -> Hash:
            async with semaphore:
                return await self.get_for_app(manifest, arch)

        tasks = [resolve_one(manifest) for manifest in manifests]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for manifest, result in zip(manifests, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("❌ %s: %s", manifest.name, result)
            else:
                logger.debug("✅ %s: %s", manifest.name, result)

        return results

    def _hash_source_url(
        self,
        config: AutoupdateArchConfig,
        substitutions: SubstitutionMap,
        name: str,
    ) -> str:
        """Expand the ``hash.url`` template of the autoupdate settings."""
        extraction = config.hash
        if not isinstance(extraction, HashExtraction) or not extraction.url:
            msg = "autoupdate hash has no url"
            raise MissingUrlError(msg, name)
        return substitute(extraction.url, substitutions)

    async def _resolve_metalink(
        self, substitutions: SubstitutionMap
    ) -> str | None:
        """Read a ``Digest`` header, falling back to the ``.meta4`` file."""
        url = substitutions["url"]
        try:
            digest = parse_digest_header(await self.fetcher.head(url))
        except HTTPStatusError as e:
            logger.debug("HEAD %s returned %s, using metalink file", url, e)
            digest = None

        if digest:
            return digest

        source = await self.fetcher.fetch(f"{url}{METALINK_SUFFIX}")
        return parse_text(source.text, substitutions)

    @staticmethod
    def _to_hash(value: str | None, name: str, source_url: str) -> Hash:
        if not value:
            msg = f"no checksum found in {source_url}"
            raise HashNotFoundError(msg, name)
        return Hash.from_hex(value)
