"""Template variable expansion for URLs and extraction patterns.

Manifests describe checksum sources with templates such as
``$baseurl/SHA256SUMS`` or ``$basename\\s+$sha256``. This module expands
those ``$name`` placeholders from an immutable :class:`SubstitutionMap`.

Regex templates are expanded in two phases, always in this order:

1. regex-fragment tokens (``$md5``, ``$sha256``, ...) are inserted as raw
   pattern syntax;
2. caller variables (``$version``, ``$basename``, ...) are inserted with
   their metacharacters escaped.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from urllib.parse import urlsplit

from manifest_hash.constants import REGEX_FRAGMENTS

_VERSION_HEAD_TAIL = re.compile(r"(?P<head>\d+\.\d+(?:\.\d+)?)(?P<tail>.*)")
_VERSION_SEPARATORS = re.compile(r"[._-]")
_EXTENSION = re.compile(r"\.[^\.]*$")
_QUERY_FILENAME = re.compile(r".*[?=]+([\w._-]+)")
_VERSION_ONLY = re.compile(r"^[v.\d]+$")

# .NET style named groups and backreferences used by existing manifests
_DOTNET_NAMED_GROUP = re.compile(r"\(\?<(?=[A-Za-z_])")
_DOTNET_BACKREFERENCE = re.compile(r"\\k<([A-Za-z_]\w*)>")


def substitute(
    template: str,
    variables: Mapping[str, str],
    literal: bool = False,
) -> str:
    """Replace ``$name`` placeholders with values from ``variables``.

    All keys are matched in a single pass with the longest key tried first,
    so ``$urlNoExt`` is never read as ``$url`` followed by ``NoExt`` and
    inserted values are never expanded again. Unknown names are left as
    they are.

    Args:
        template: Text containing ``$name`` placeholders.
        variables: Placeholder name (without ``$``) to value.
        literal: Escape regex metacharacters of every inserted value.

    Returns:
        The expanded template.

    """
    if "$" not in template or not variables:
        return template

    names = sorted(variables, key=len, reverse=True)
    pattern = re.compile(
        r"\$(" + "|".join(re.escape(name) for name in names) + ")"
    )

    def replace(match: re.Match[str]) -> str:
        value = variables[match.group(1)]
        return re.escape(value) if literal else value

    return pattern.sub(replace, template)


def substitute_regex(template: str, variables: Mapping[str, str]) -> str:
    """Expand a regex template: fragments first, then escaped variables."""
    template = substitute(template, REGEX_FRAGMENTS)
    return substitute(template, variables, literal=True)


def to_python_regex(pattern: str) -> str:
    """Rewrite .NET named groups so the pattern compiles with ``re``.

    ``(?<name>...)`` becomes ``(?P<name>...)`` and ``\\k<name>`` becomes
    ``(?P=name)``. Lookbehind assertions are left alone.
    """
    pattern = _DOTNET_NAMED_GROUP.sub("(?P<", pattern)
    return _DOTNET_BACKREFERENCE.sub(r"(?P=\1)", pattern)


# =============================================================================
# URL helpers
# =============================================================================


def strip_fragment(url: str) -> str:
    """Drop the ``#fragment`` of a URL."""
    return url.split("#", 1)[0]


def strip_filename(url: str) -> str:
    """Drop the last path segment of a URL, keeping the trailing slash."""
    leaf = url.rsplit("/", 1)[-1]
    return url[: len(url) - len(leaf)]


def strip_ext(name: str) -> str:
    """Drop the last ``.extension`` of a file name or URL."""
    return _EXTENSION.sub("", name)


def _leaf(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


def remote_filename(url: str) -> str:
    """Guess the file name a download URL will produce.

    Handles ``download?file=name.zip`` query strings, URLs whose last
    segment is only a version number, and ``#/renamed.ext`` fragments that
    give the artifact an explicit name.
    """
    parts = urlsplit(url)
    path_and_query = parts.path
    if parts.query:
        path_and_query = f"{parts.path}?{parts.query}"

    name = _leaf(path_and_query)
    query_match = _QUERY_FILENAME.match(name)
    if query_match:
        name = query_match.group(1)

    if "." not in name or _VERSION_ONLY.match(name):
        name = _leaf(parts.path)

    if "." not in name and parts.fragment:
        name = parts.fragment.strip("/#")

    return name


# =============================================================================
# Substitution map
# =============================================================================


class SubstitutionMap(Mapping[str, str]):
    """Read-only mapping of template variables.

    Built once per resolution; every ``with_*`` method returns a new map and
    leaves the original untouched.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, str] | None = None) -> None:
        """Initialize the map from an optional mapping of variables."""
        self._data: dict[str, str] = dict(data or {})

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"SubstitutionMap({self._data!r})"

    @classmethod
    def for_version(cls, version: str) -> SubstitutionMap:
        """Create the version variables for a package version.

        ``1.2.3.4-beta`` yields ``majorVersion=1`` ... ``buildVersion=4``,
        ``preReleaseVersion=beta`` and separator variants such as
        ``dashVersion=1-2-3-4-beta``. Missing components are empty strings.
        """
        dash_parts = version.split("-")
        numbers = dash_parts[0].split(".")

        def number(index: int) -> str:
            return numbers[index] if index < len(numbers) else ""

        data = {
            "version": version,
            "dotVersion": _VERSION_SEPARATORS.sub(".", version),
            "underscoreVersion": _VERSION_SEPARATORS.sub("_", version),
            "dashVersion": _VERSION_SEPARATORS.sub("-", version),
            "cleanVersion": _VERSION_SEPARATORS.sub("", version),
            "majorVersion": number(0),
            "minorVersion": number(1),
            "patchVersion": number(2),
            "buildVersion": number(3),
            "preReleaseVersion": dash_parts[-1],
        }

        head_tail = _VERSION_HEAD_TAIL.search(version)
        if head_tail:
            data["matchHead"] = head_tail.group("head")
            data["matchTail"] = head_tail.group("tail")

        return cls(data)

    def with_url(self, url: str) -> SubstitutionMap:
        """Return a copy with the URL variables of a download URL."""
        stripped = strip_fragment(url)
        basename = remote_filename(url)
        return self.merged(
            {
                "url": stripped,
                "baseurl": strip_filename(stripped).rstrip("/"),
                "basename": basename,
                "urlNoExt": strip_ext(stripped),
                "basenameNoExt": strip_ext(basename),
            }
        )

    def with_matches(self, matches: Mapping[str, str]) -> SubstitutionMap:
        """Return a copy exposing capture groups as ``$matchName``."""
        return self.merged(
            {
                f"match{name[:1].upper()}{name[1:]}": value
                for name, value in matches.items()
                if value is not None
            }
        )

    def merged(self, variables: Mapping[str, str]) -> SubstitutionMap:
        """Return a copy with extra variables; new values win."""
        return SubstitutionMap({**self._data, **variables})
