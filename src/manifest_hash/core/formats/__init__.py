"""Checksum extractors for the source formats download sites publish.

Every extractor is a pure function of the fetched source; None means the
source holds no matching checksum, while a malformed source raises.
"""

from manifest_hash.core.formats.headers import parse_digest_header
from manifest_hash.core.formats.json_path import parse_json
from manifest_hash.core.formats.rdf import parse_rdf
from manifest_hash.core.formats.text import parse_text
from manifest_hash.core.formats.xpath import parse_xml

__all__ = [
    "parse_digest_header",
    "parse_json",
    "parse_rdf",
    "parse_text",
    "parse_xml",
]
