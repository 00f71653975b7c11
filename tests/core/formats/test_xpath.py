"""Tests for XPath checksum extraction."""

import pytest

from manifest_hash.core.formats.xpath import (
    collect_namespaces,
    parse_document,
    parse_xml,
)
from manifest_hash.core.substitutions import SubstitutionMap
from manifest_hash.exceptions import InvalidExpressionError, XmlParseError

SHA256_HEX = "cd" * 32

FEED = f"""<?xml version="1.0" encoding="utf-8"?>
<releases xmlns="urn:releases" xmlns:c="urn:checksums">
  <release version="1.2.3">
    <file name="tool-1.2.3.zip" c:sha256="{SHA256_HEX}"/>
  </release>
</releases>
"""

PLAIN = f"""<files>
  <file name="tool-1.2.3.zip">
    <hash type="sha256">
      {SHA256_HEX}
    </hash>
  </file>
</files>
"""

PAGE = f"""<!DOCTYPE html>
<html><body>
<table><tr><td class="name">tool-1.2.3.zip</td>
<td class="sha"><code>{SHA256_HEX}</code></td></tr></table>
</body></html>
"""


@pytest.fixture
def substitutions():
    """Variables for a release artifact."""
    return SubstitutionMap.for_version("1.2.3").with_url(
        "https://example.com/dl/tool-1.2.3.zip"
    )


class TestParseXml:
    """Test cases for parse_xml."""

    def test_element_text_is_stripped(self, substitutions):
        """Test element text is returned without surrounding whitespace."""
        result = parse_xml(
            PLAIN, substitutions, "//file[@name='$basename']/hash"
        )
        assert result == SHA256_HEX

    def test_namespaced_attribute(self, substitutions):
        """Test declared prefixes are available to the query."""
        result = parse_xml(
            FEED,
            substitutions,
            "//ns:release[@version='$version']/ns:file/@c:sha256",
        )
        assert result == SHA256_HEX

    def test_html_page(self, substitutions):
        """Test HTML pages are parsed leniently."""
        result = parse_xml(PAGE, substitutions, "//td[@class='sha']")
        assert result == SHA256_HEX

    def test_string_result(self, substitutions):
        """Test XPath functions returning strings are supported."""
        result = parse_xml(
            PLAIN, substitutions, "normalize-space(//hash)"
        )
        assert result == SHA256_HEX

    def test_no_match_returns_none(self, substitutions):
        """Test a query selecting nothing."""
        assert parse_xml(PLAIN, substitutions, "//missing") is None

    def test_invalid_query_raises(self, substitutions):
        """Test a malformed query."""
        with pytest.raises(InvalidExpressionError):
            parse_xml(PLAIN, substitutions, "//file[")

    def test_malformed_xml_raises(self, substitutions):
        """Test a document that is not well-formed."""
        with pytest.raises(XmlParseError):
            parse_xml("<files><file></files>", substitutions, "//file")


class TestParseDocument:
    """Test cases for document parsing helpers."""

    def test_default_namespace_is_registered(self):
        """Test the default namespace is exposed under the ns prefix."""
        namespaces = collect_namespaces(parse_document(FEED))

        assert namespaces == {"ns": "urn:releases", "c": "urn:checksums"}

    def test_bytes_with_bom(self):
        """Test a UTF-8 byte order mark does not change parser choice."""
        root = parse_document(b"\xef\xbb\xbf" + PAGE.encode())
        assert root.tag == "html"

    def test_entities_are_not_expanded(self):
        """Test external entities are not resolved."""
        document = (
            '<?xml version="1.0"?>'
            '<!DOCTYPE r [<!ENTITY e SYSTEM "file:///etc/passwd">]>'
            "<r>&e;</r>"
        )

        root = parse_document(document)

        assert "root:" not in "".join(root.itertext())
