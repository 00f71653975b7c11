"""Buckets: directories of package manifests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from manifest_hash.domain.manifest import Manifest
from manifest_hash.exceptions import ManifestNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

MANIFEST_SUFFIX = ".json"


@dataclass(frozen=True, slots=True)
class Bucket:
    """A local bucket checkout.

    Manifests live in ``<path>/bucket/*.json``. Older buckets keep them at
    the top level, which is used when there is no ``bucket`` directory.
    """

    name: str
    path: Path

    @classmethod
    def from_path(cls, path: Path) -> Bucket:
        """Create a bucket named after its directory."""
        return cls(path.name, path)

    @property
    def manifests_dir(self) -> Path:
        """Directory holding the manifest files."""
        nested = self.path / "bucket"
        if nested.is_dir():
            return nested
        return self.path

    def manifest_path(self, name: str) -> Path:
        """Path the manifest for ``name`` would have."""
        return self.manifests_dir / f"{name}{MANIFEST_SUFFIX}"

    def has_manifest(self, name: str) -> bool:
        """Check if the bucket provides ``name``."""
        return self.manifest_path(name).is_file()

    def get_manifest(self, name: str) -> Manifest:
        """Load the manifest for ``name``.

        Raises:
            ManifestNotFoundError: If the bucket has no such manifest.
            ManifestParseError: If the manifest file is invalid.

        """
        path = self.manifest_path(name)
        if not path.is_file():
            msg = f"not in bucket '{self.name}'"
            raise ManifestNotFoundError(msg, name)
        return Manifest.from_path(path, bucket=self.name)

    def manifest_names(self) -> list[str]:
        """Sorted names of every manifest in the bucket."""
        directory = self.manifests_dir
        if not directory.is_dir():
            return []
        return sorted(
            path.stem
            for path in directory.glob(f"*{MANIFEST_SUFFIX}")
            if path.is_file()
        )
