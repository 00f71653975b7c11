"""Checksum extraction from XML and HTML documents with XPath."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from lxml import etree

from manifest_hash.core.substitutions import substitute
from manifest_hash.exceptions import InvalidExpressionError, XmlParseError

if TYPE_CHECKING:
    from collections.abc import Mapping

_UTF8_BOM = b"\xef\xbb\xbf"
_HTML_MARKERS = (b"<!doctype html", b"<html")

# Prefix under which a document's default namespace is queried
DEFAULT_NAMESPACE_PREFIX = "ns"


def parse_document(source: str | bytes) -> etree._Element:
    """Parse an XML document, or an HTML page when it starts like one.

    XML is parsed without resolving entities or touching the network.

    Raises:
        XmlParseError: If the document cannot be parsed.

    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    head = data.removeprefix(_UTF8_BOM).lstrip()[:64].lower()

    if head.startswith(_HTML_MARKERS):
        parser = etree.HTMLParser()
    else:
        parser = etree.XMLParser(resolve_entities=False, no_network=True)

    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise XmlParseError(str(e)) from e

    if root is None:
        msg = "document is empty"
        raise XmlParseError(msg)
    return root


def collect_namespaces(root: etree._Element) -> dict[str, str]:
    """Gather every namespace declared in the document.

    The default namespace is registered as ``ns`` unless the document
    already declares that prefix. The first declaration of a prefix wins.
    """
    namespaces: dict[str, str] = {}
    for element in root.iter(tag=etree.Element):
        for prefix, uri in element.nsmap.items():
            namespaces.setdefault(prefix or DEFAULT_NAMESPACE_PREFIX, uri)
    return namespaces


def _node_text(node: Any) -> str | None:
    if isinstance(node, etree._Element):
        text = "".join(node.itertext())
    elif isinstance(node, bool):
        return None
    else:
        text = str(node)
    return text.strip() or None


def parse_xml(
    source: str | bytes,
    substitutions: Mapping[str, str],
    expression: str,
) -> str | None:
    """Evaluate an XPath query and return the text it selects.

    Args:
        source: XML or HTML document.
        substitutions: Template variables for the query.
        expression: XPath template.

    Returns:
        Text of the first selected node or attribute, or None.

    Raises:
        XmlParseError: If the document cannot be parsed.
        InvalidExpressionError: If the query is not valid XPath.

    """
    root = parse_document(source)
    path = substitute(expression, substitutions)

    try:
        result = root.xpath(path, namespaces=collect_namespaces(root))
    except etree.XPathError as e:
        raise InvalidExpressionError(str(e), path) from e

    if isinstance(result, list):
        if not result:
            return None
        result = result[0]
    return _node_text(result)
