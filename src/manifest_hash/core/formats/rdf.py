"""Checksum extraction from RDF file listings.

Some download sites publish an RDF/XML document with one ``Content`` element
per file, each carrying ``rdf:about`` and a ``sha256`` child.
"""

from __future__ import annotations

from lxml import etree

from manifest_hash.exceptions import RdfParseError

RDF_NAMESPACE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"


def parse_rdf(source: str | bytes, file_name: str) -> str | None:
    """Return the ``sha256`` recorded for ``file_name``.

    The ``about`` attribute must equal ``file_name`` exactly, including
    case.

    Raises:
        RdfParseError: If the document is not well-formed XML.

    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise RdfParseError(str(e)) from e

    for content in root.iter("{*}Content"):
        about = content.get(f"{{{RDF_NAMESPACE}}}about", content.get("about"))
        if about != file_name:
            continue
        for digest in content.iterchildren("{*}sha256"):
            text = (digest.text or "").strip()
            if text:
                return text

    return None
