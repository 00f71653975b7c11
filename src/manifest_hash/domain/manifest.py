"""Package manifest model.

Manifests are JSON documents kept in buckets. Install and autoupdate
settings may be given once at the top level and overridden per
architecture; :func:`merge_defaults` folds the two together at read time.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

import orjson

from manifest_hash.config.schemas import validate_manifest
from manifest_hash.core.substitutions import SubstitutionMap, substitute
from manifest_hash.domain.hashes import Hash
from manifest_hash.exceptions import (
    ManifestParseError,
    MissingAutoupdateConfigError,
)

if TYPE_CHECKING:
    from pathlib import Path

T = TypeVar("T")

_UTF8_BOM = "\ufeff"


class Architecture(Enum):
    """Windows architectures a manifest can target."""

    X64 = "64bit"
    X86 = "32bit"
    ARM64 = "arm64"

    @classmethod
    def current(cls) -> Architecture:
        """Detect the host architecture."""
        machine = platform.machine().lower()

        if machine in ("aarch64", "arm64"):
            return cls.ARM64
        if machine in ("x86_64", "amd64"):
            return cls.X64

        return cls.X86


def _as_tuple(value: str | list[str] | None) -> tuple[str, ...] | None:
    """Normalize a string-or-list manifest field."""
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def merge_defaults(specific: T, default: T) -> T:
    """Fill the unset fields of ``specific`` from ``default``.

    Fields set on ``specific`` always win; ``None`` means unset. Neither
    argument is modified.
    """
    overrides = {}
    for config_field in fields(specific):  # type: ignore[arg-type]
        value = getattr(specific, config_field.name)
        if value is not None:
            overrides[config_field.name] = value
    return replace(default, **overrides)  # type: ignore[type-var]


@dataclass(frozen=True, slots=True)
class InstallConfig:
    """Download and install settings for one architecture."""

    url: tuple[str, ...] | None = None
    hash: tuple[str, ...] | None = None
    bin: str | list[Any] | None = None
    extract_dir: tuple[str, ...] | None = None
    extract_to: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstallConfig:
        """Build an install config from a manifest (sub)object."""
        return cls(
            url=_as_tuple(data.get("url")),
            hash=_as_tuple(data.get("hash")),
            bin=data.get("bin"),
            extract_dir=_as_tuple(data.get("extract_dir")),
            extract_to=_as_tuple(data.get("extract_to")),
        )

    @property
    def first_url(self) -> str | None:
        """First download URL, if any."""
        return self.url[0] if self.url else None


@dataclass(frozen=True, slots=True)
class HashExtraction:
    """How to find a checksum for an updated artifact.

    Attributes:
        url: Page or file holding the checksum (a template).
        regex: Text pattern whose first group is the checksum.
        find: Alias of ``regex``.
        jsonpath: JSON-path query into a JSON source.
        jp: Alias of ``jsonpath``.
        xpath: XPath query into an XML or HTML source.
        mode: Explicit strategy name such as ``metalink`` or ``rdf``.

    """

    url: str | None = None
    regex: str | None = None
    find: str | None = None
    jsonpath: str | None = None
    jp: str | None = None
    xpath: str | None = None
    mode: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HashExtraction:
        """Build an extraction from a manifest ``hash`` object."""
        return cls(**{f.name: data.get(f.name) for f in fields(cls)})

    @property
    def text_regex(self) -> str | None:
        """The ``regex`` or ``find`` pattern."""
        return self.regex or self.find

    @property
    def json_path(self) -> str | None:
        """The ``jsonpath`` or ``jp`` query."""
        return self.jsonpath or self.jp


HashConfig = str | HashExtraction | tuple[HashExtraction, ...]


def _parse_hash_config(value: Any) -> HashConfig | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return HashExtraction.from_dict(value)
    return tuple(
        HashExtraction(url=item)
        if isinstance(item, str)
        else HashExtraction.from_dict(item)
        for item in value
    )


@dataclass(frozen=True, slots=True)
class AutoupdateArchConfig:
    """Autoupdate settings for one architecture."""

    url: tuple[str, ...] | None = None
    hash: HashConfig | None = None
    extract_dir: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AutoupdateArchConfig:
        """Build autoupdate settings from a manifest (sub)object."""
        return cls(
            url=_as_tuple(data.get("url")),
            hash=_parse_hash_config(data.get("hash")),
            extract_dir=_as_tuple(data.get("extract_dir")),
        )

    @property
    def first_url(self) -> str | None:
        """First download URL template, if any."""
        return self.url[0] if self.url else None


def _parse_architectures(
    data: dict[str, Any] | None, builder: Any
) -> dict[Architecture, Any]:
    if data is None:
        return {}
    return {Architecture(name): builder(value) for name, value in data.items()}


@dataclass(frozen=True, slots=True)
class AutoupdateConfig:
    """The ``autoupdate`` section: defaults plus architecture overrides."""

    default: AutoupdateArchConfig = field(
        default_factory=AutoupdateArchConfig
    )
    architecture: dict[Architecture, AutoupdateArchConfig] = field(
        default_factory=dict
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AutoupdateConfig:
        """Build the autoupdate section of a manifest."""
        return cls(
            default=AutoupdateArchConfig.from_dict(data),
            architecture=_parse_architectures(
                data.get("architecture"), AutoupdateArchConfig.from_dict
            ),
        )

    def for_arch(self, arch: Architecture) -> AutoupdateArchConfig:
        """Merge the settings for ``arch`` over the defaults."""
        specific = self.architecture.get(arch, AutoupdateArchConfig())
        return merge_defaults(specific, self.default)


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, list):
        return "\n".join(str(line) for line in value)
    if isinstance(value, dict) and key == "license":
        return value.get("identifier") or value.get("url")
    return str(value)


@dataclass(frozen=True, slots=True)
class Manifest:
    """A parsed package manifest.

    Attributes:
        name: Package name, taken from the manifest file name.
        version: Package version string.
        bucket: Bucket that provided the manifest, when known.
        install: Top-level install settings (the architecture defaults).
        architecture: Per-architecture install overrides.
        autoupdate: Autoupdate section, if the manifest has one.

    """

    name: str
    version: str
    bucket: str | None = None
    homepage: str | None = None
    description: str | None = None
    license: str | None = None
    notes: str | None = None
    depends: tuple[str, ...] = ()
    install: InstallConfig = field(default_factory=InstallConfig)
    architecture: dict[Architecture, InstallConfig] = field(
        default_factory=dict
    )
    autoupdate: AutoupdateConfig | None = None

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], name: str, bucket: str | None = None
    ) -> Manifest:
        """Build a manifest from decoded JSON that passed validation."""
        autoupdate = data.get("autoupdate")
        return cls(
            name=name,
            version=data["version"],
            bucket=bucket,
            homepage=_optional_str(data, "homepage"),
            description=_optional_str(data, "description"),
            license=_optional_str(data, "license"),
            notes=_optional_str(data, "notes"),
            depends=_as_tuple(data.get("depends")) or (),
            install=InstallConfig.from_dict(data),
            architecture=_parse_architectures(
                data.get("architecture"), InstallConfig.from_dict
            ),
            autoupdate=(
                AutoupdateConfig.from_dict(autoupdate)
                if autoupdate is not None
                else None
            ),
        )

    @classmethod
    def from_str(
        cls, text: str | bytes, name: str, bucket: str | None = None
    ) -> Manifest:
        """Parse manifest JSON text.

        A leading UTF-8 byte order mark is ignored.

        Raises:
            ManifestParseError: If the text is not a valid manifest.

        """
        if isinstance(text, bytes):
            text = text.decode("utf-8-sig")
        text = text.removeprefix(_UTF8_BOM)

        try:
            data = orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise ManifestParseError(str(e), name) from e

        validate_manifest(data, name)
        return cls.from_dict(data, name, bucket)

    @classmethod
    def from_path(cls, path: Path, bucket: str | None = None) -> Manifest:
        """Load a manifest file; the package name is the file stem."""
        return cls.from_str(path.read_bytes(), path.stem, bucket)

    @property
    def bin(self) -> str | list[Any] | None:
        """Top-level ``bin`` entry."""
        return self.install.bin

    def install_config_for(
        self, arch: Architecture | None = None
    ) -> InstallConfig:
        """Merge the install settings for ``arch`` over the defaults."""
        arch = arch or Architecture.current()
        specific = self.architecture.get(arch, InstallConfig())
        return merge_defaults(specific, self.install)

    def autoupdate_config_for(
        self, arch: Architecture | None = None
    ) -> AutoupdateArchConfig | None:
        """Merged autoupdate settings for ``arch``, if autoupdate exists."""
        if self.autoupdate is None:
            return None
        return self.autoupdate.for_arch(arch or Architecture.current())

    def install_url(self, arch: Architecture | None = None) -> str | None:
        """Effective download URL for ``arch``."""
        return self.install_config_for(arch).first_url

    def declared_hash(self, arch: Architecture | None = None) -> Hash | None:
        """Checksum written in the manifest for ``arch``, if any."""
        hashes = self.install_config_for(arch).hash
        if not hashes:
            return None
        return Hash.parse(hashes[0])

    def binaries(self, arch: Architecture | None = None) -> list[str]:
        """Executable paths exposed by the package.

        ``bin`` may be a single path, a list of paths, or a list holding
        ``[path, alias, args...]`` arrays; only the paths are returned.
        """
        entries = self.install_config_for(arch).bin
        if entries is None:
            return []
        if isinstance(entries, str):
            return [entries]

        binaries = []
        for entry in entries:
            if isinstance(entry, str):
                binaries.append(entry)
            elif isinstance(entry, list) and entry:
                binaries.append(str(entry[0]))
        return binaries

    def with_version(self, version: str) -> Manifest:
        """Return a copy of the manifest updated to ``version``.

        Download URLs are rebuilt from the autoupdate templates. Declared
        hashes are dropped since they belong to the old artifact.

        Raises:
            MissingAutoupdateConfigError: If there is no autoupdate section.

        """
        if self.autoupdate is None:
            msg = "cannot update a manifest without autoupdate"
            raise MissingAutoupdateConfigError(msg, self.name)

        variables = SubstitutionMap.for_version(version)

        def updated(
            install: InstallConfig, auto: AutoupdateArchConfig
        ) -> InstallConfig:
            url = install.url
            if auto.url is not None:
                url = tuple(substitute(u, variables) for u in auto.url)
            extract_dir = install.extract_dir
            if auto.extract_dir is not None:
                extract_dir = tuple(
                    substitute(d, variables) for d in auto.extract_dir
                )
            return replace(
                install, url=url, hash=None, extract_dir=extract_dir
            )

        architecture = {
            arch: updated(
                self.architecture.get(arch, InstallConfig()),
                self.autoupdate.for_arch(arch),
            )
            for arch in Architecture
            if arch in self.architecture
            or arch in self.autoupdate.architecture
        }

        return replace(
            self,
            version=version,
            install=updated(self.install, self.autoupdate.default),
            architecture=architecture,
        )
