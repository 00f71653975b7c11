"""Tests for package references and manifest lookup."""

from pathlib import Path
from unittest.mock import AsyncMock

import orjson
import pytest

from manifest_hash.core.buckets import Bucket
from manifest_hash.core.fetch import FetchedSource
from manifest_hash.core.reference import ManifestResolver, PackageReference
from manifest_hash.domain.manifest import Architecture
from manifest_hash.exceptions import (
    BucketNotFoundError,
    InvalidReferenceError,
    ManifestNotFoundError,
)

MANIFEST_URL = "https://raw.example.com/bucket/tool.json"


@pytest.fixture
def buckets(tmp_path, manifest_data, write_manifest):
    """Three buckets; 'main' and 'extras' both provide 'tool'."""
    extras_data = dict(manifest_data, version="9.9.9")
    write_manifest(tmp_path / "main" / "bucket", "tool", manifest_data)
    write_manifest(tmp_path / "extras" / "bucket", "tool", extras_data)
    write_manifest(tmp_path / "versions" / "bucket", "other", manifest_data)
    return [
        Bucket.from_path(tmp_path / name)
        for name in ("versions", "main", "extras")
    ]


class TestPackageReference:
    """Test cases for PackageReference.parse."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("git", PackageReference("git")),
            ("main/git", PackageReference("git", bucket="main")),
            ("git@2.44.0", PackageReference("git", version="2.44.0")),
            (
                "main/git@2.44.0",
                PackageReference("git", bucket="main", version="2.44.0"),
            ),
            (MANIFEST_URL, PackageReference("tool", url=MANIFEST_URL)),
        ],
    )
    def test_parse(self, text, expected):
        """Test the supported reference forms."""
        assert PackageReference.parse(text) == expected

    def test_parse_local_file(self):
        """Test a .json path is a local manifest reference."""
        reference = PackageReference.parse("manifests/tool.json")

        assert reference.name == "tool"
        assert reference.path == Path("manifests/tool.json")

    @pytest.mark.parametrize(
        "text", ["", "   ", "git@", "/git", "main/", "a/b/git"]
    )
    def test_parse_invalid(self, text):
        """Test malformed references are rejected."""
        with pytest.raises(InvalidReferenceError):
            PackageReference.parse(text)

    @pytest.mark.parametrize(
        "text", ["git", "main/git", "main/git@1.0", MANIFEST_URL]
    )
    def test_str_renders_typed_form(self, text):
        """Test rendering gives back what was typed."""
        assert str(PackageReference.parse(text)) == text


class TestManifestResolver:
    """Test cases for ManifestResolver."""

    @pytest.mark.asyncio
    async def test_find_sorted_by_bucket(self, buckets):
        """Test every provider is returned, sorted by bucket name."""
        manifests = await ManifestResolver(buckets).find("tool")

        assert [m.bucket for m in manifests] == ["extras", "main"]
        assert [m.version for m in manifests] == ["9.9.9", "1.2.3"]

    @pytest.mark.asyncio
    async def test_find_in_named_bucket(self, buckets):
        """Test a bucket prefix restricts the search."""
        manifests = await ManifestResolver(buckets).find("main/tool")

        assert len(manifests) == 1
        assert manifests[0].bucket == "main"

    @pytest.mark.asyncio
    async def test_find_nothing(self, buckets):
        """Test an unknown package yields an empty list."""
        assert await ManifestResolver(buckets).find("ghost") == []

    @pytest.mark.asyncio
    async def test_unknown_bucket(self, buckets):
        """Test an unknown bucket name is an error."""
        with pytest.raises(BucketNotFoundError) as exc_info:
            await ManifestResolver(buckets).find("nope/tool")
        assert exc_info.value.target == "nope"

    @pytest.mark.asyncio
    async def test_resolve_returns_first(self, buckets):
        """Test resolve picks the first match."""
        manifest = await ManifestResolver(buckets).resolve("tool")
        assert manifest.bucket == "extras"

    @pytest.mark.asyncio
    async def test_resolve_not_found(self, buckets):
        """Test resolve raises when nothing matches."""
        with pytest.raises(ManifestNotFoundError) as exc_info:
            await ManifestResolver(buckets).resolve("main/ghost")
        assert exc_info.value.target == "main/ghost"

    @pytest.mark.asyncio
    async def test_version_is_applied(self, buckets):
        """Test a requested version rewrites the download URL."""
        manifest = await ManifestResolver(buckets).resolve("main/tool@2.0.0")

        assert manifest.version == "2.0.0"
        assert manifest.install_url(Architecture.X64) == (
            "https://example.com/releases/tool-2.0.0-x64.zip"
        )

    @pytest.mark.asyncio
    async def test_same_version_is_unchanged(self, buckets):
        """Test requesting the current version keeps the manifest."""
        manifest = await ManifestResolver(buckets).resolve("main/tool@1.2.3")
        assert manifest.declared_hash(Architecture.X64) is not None

    @pytest.mark.asyncio
    async def test_local_file(self, tmp_path, manifest_data, write_manifest):
        """Test a local manifest file is loaded directly."""
        path = write_manifest(tmp_path / "local", "mytool", manifest_data)

        manifests = await ManifestResolver([]).find(str(path))

        assert [m.name for m in manifests] == ["mytool"]

    @pytest.mark.asyncio
    async def test_url_reference(self, manifest_data):
        """Test a manifest URL is fetched through the fetcher."""
        fetcher = AsyncMock()
        fetcher.fetch.return_value = FetchedSource(
            url=MANIFEST_URL, status=200, body=orjson.dumps(manifest_data)
        )

        manifest = await ManifestResolver([], fetcher=fetcher).resolve(
            MANIFEST_URL
        )

        fetcher.fetch.assert_awaited_once_with(MANIFEST_URL)
        assert manifest.name == "tool"
        assert manifest.version == "1.2.3"

    @pytest.mark.asyncio
    async def test_url_reference_without_fetcher(self):
        """Test a URL reference needs a fetcher."""
        with pytest.raises(InvalidReferenceError):
            await ManifestResolver([]).find(MANIFEST_URL)
