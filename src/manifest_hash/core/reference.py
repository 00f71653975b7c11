"""Resolution of package references to manifests.

A reference is what a user types to name a package: ``git``,
``main/git``, ``git@2.44.0``, a manifest URL or a local ``.json`` file.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from manifest_hash.constants import DEFAULT_MAX_CONCURRENT_LOOKUPS
from manifest_hash.core.buckets import MANIFEST_SUFFIX
from manifest_hash.core.substitutions import remote_filename, strip_ext
from manifest_hash.domain.manifest import Manifest
from manifest_hash.exceptions import (
    BucketNotFoundError,
    InvalidReferenceError,
    ManifestNotFoundError,
)
from manifest_hash.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from manifest_hash.core.buckets import Bucket
    from manifest_hash.core.fetch import SourceFetcher

logger = get_logger(__name__)

_URL_SCHEMES = ("http://", "https://")


@dataclass(frozen=True, slots=True)
class PackageReference:
    """A parsed package reference.

    Attributes:
        name: Package (manifest) name.
        bucket: Bucket to look in; all buckets when None.
        version: Requested version; the manifest's own when None.
        url: Manifest URL for remote references.
        path: Manifest file for local references.

    """

    name: str
    bucket: str | None = None
    version: str | None = None
    url: str | None = None
    path: Path | None = None

    @classmethod
    def parse(cls, text: str) -> PackageReference:
        """Parse a reference string.

        Raises:
            InvalidReferenceError: If the reference is empty or malformed.

        """
        text = text.strip()
        if not text:
            msg = "reference is empty"
            raise InvalidReferenceError(msg)

        if text.startswith(_URL_SCHEMES):
            name = strip_ext(remote_filename(text))
            if not name:
                msg = "url does not name a manifest file"
                raise InvalidReferenceError(msg, text)
            return cls(name=name, url=text)

        if text.endswith(MANIFEST_SUFFIX):
            path = Path(text).expanduser()
            return cls(name=path.stem, path=path)

        body, at, version = text.partition("@")
        if at and not version:
            msg = "version after '@' is empty"
            raise InvalidReferenceError(msg, text)

        bucket, slash, name = body.rpartition("/")
        if not name or (slash and not bucket) or "/" in bucket:
            msg = "expected 'name' or 'bucket/name'"
            raise InvalidReferenceError(msg, text)

        return cls(name=name, bucket=bucket or None, version=version or None)

    def __str__(self) -> str:
        """Render the reference the way it would be typed."""
        if self.url:
            return self.url
        if self.path:
            return str(self.path)
        text = f"{self.bucket}/{self.name}" if self.bucket else self.name
        if self.version:
            text = f"{text}@{self.version}"
        return text


class ManifestResolver:
    """Finds the manifests a reference points to."""

    def __init__(
        self,
        buckets: Sequence[Bucket],
        fetcher: SourceFetcher | None = None,
        max_workers: int = DEFAULT_MAX_CONCURRENT_LOOKUPS,
    ) -> None:
        """Initialize resolver.

        Args:
            buckets: Buckets to search
            fetcher: HTTP collaborator, needed for url references only
            max_workers: Bucket lookups run at once

        """
        self.buckets = list(buckets)
        self.fetcher = fetcher
        self.max_workers = max(1, max_workers)

    async def find(
        self, reference: PackageReference | str
    ) -> list[Manifest]:
        """Find every manifest matching the reference.

        Bucket lookups run on worker threads. Results are sorted by bucket
        name, then manifest name, whatever order the lookups finish in.

        Raises:
            BucketNotFoundError: If the reference names an unknown bucket.
            InvalidReferenceError: If a url reference cannot be fetched
                because no fetcher was configured.
            ManifestParseError: If a matching manifest is invalid.

        """
        if isinstance(reference, str):
            reference = PackageReference.parse(reference)

        if reference.url:
            manifests = [await self._fetch_manifest(reference)]
        elif reference.path:
            manifests = [
                await asyncio.to_thread(Manifest.from_path, reference.path)
            ]
        else:
            manifests = await self._search_buckets(reference)

        return [self._apply_version(m, reference) for m in manifests]

    async def resolve(self, reference: PackageReference | str) -> Manifest:
        """Return the first manifest matching the reference.

        Raises:
            ManifestNotFoundError: If no bucket provides the manifest.

        """
        if isinstance(reference, str):
            reference = PackageReference.parse(reference)

        manifests = await self.find(reference)
        if not manifests:
            msg = "no bucket provides this package"
            raise ManifestNotFoundError(msg, str(reference))
        return manifests[0]

    def _select_buckets(self, reference: PackageReference) -> list[Bucket]:
        if reference.bucket is None:
            return self.buckets

        selected = [b for b in self.buckets if b.name == reference.bucket]
        if not selected:
            msg = "no such bucket"
            raise BucketNotFoundError(msg, reference.bucket)
        return selected

    async def _search_buckets(
        self, reference: PackageReference
    ) -> list[Manifest]:
        buckets = self._select_buckets(reference)
        semaphore = asyncio.Semaphore(self.max_workers)

        async def lookup(bucket: Bucket) -> Manifest | None:
            async with semaphore:
                return await asyncio.to_thread(
                    self._load_if_present, bucket, reference.name
                )

        results = await asyncio.gather(*(lookup(b) for b in buckets))
        manifests = [manifest for manifest in results if manifest is not None]
        manifests.sort(key=lambda m: (m.bucket or "", m.name))

        logger.debug(
            "🔍 %s found in %d of %d buckets",
            reference.name,
            len(manifests),
            len(buckets),
        )
        return manifests

    @staticmethod
    def _load_if_present(bucket: Bucket, name: str) -> Manifest | None:
        if not bucket.has_manifest(name):
            return None
        return bucket.get_manifest(name)

    async def _fetch_manifest(self, reference: PackageReference) -> Manifest:
        if self.fetcher is None:
            msg = "url references need an HTTP fetcher"
            raise InvalidReferenceError(msg, reference.url)

        source = await self.fetcher.fetch(reference.url or "")
        return Manifest.from_str(source.body, reference.name)

    @staticmethod
    def _apply_version(
        manifest: Manifest, reference: PackageReference
    ) -> Manifest:
        if reference.version is None or reference.version == manifest.version:
            return manifest

        logger.info(
            "Using %s %s instead of %s",
            manifest.name,
            reference.version,
            manifest.version,
        )
        return manifest.with_version(reference.version)
