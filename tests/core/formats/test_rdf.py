"""Tests for RDF file listing extraction."""

import pytest

from manifest_hash.core.formats.rdf import parse_rdf
from manifest_hash.exceptions import RdfParseError

SHA256_HEX = "ef" * 32
OTHER_HEX = "01" * 32

LISTING = f"""<?xml version="1.0" encoding="UTF-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://example.com/rdf/digest#">
  <Content rdf:about="Tool-1.0.zip">
    <sha256>{OTHER_HEX}</sha256>
  </Content>
  <Content rdf:about="tool-1.0.zip">
    <size>1024</size>
    <sha256>{SHA256_HEX}</sha256>
  </Content>
</rdf:RDF>
"""


class TestParseRdf:
    """Test cases for parse_rdf."""

    def test_selects_content_by_about(self):
        """Test the entry whose about matches the file name is used."""
        assert parse_rdf(LISTING, "tool-1.0.zip") == SHA256_HEX

    def test_about_is_case_sensitive(self):
        """Test file names are compared exactly."""
        assert parse_rdf(LISTING, "Tool-1.0.zip") == OTHER_HEX
        assert parse_rdf(LISTING, "TOOL-1.0.zip") is None

    def test_accepts_bytes(self):
        """Test byte input is parsed."""
        assert parse_rdf(LISTING.encode(), "tool-1.0.zip") == SHA256_HEX

    def test_unqualified_about(self):
        """Test a plain about attribute is accepted."""
        listing = (
            '<RDF><Content about="a.zip">'
            f"<sha256>{SHA256_HEX}</sha256></Content></RDF>"
        )
        assert parse_rdf(listing, "a.zip") == SHA256_HEX

    def test_malformed_raises(self):
        """Test a document that is not XML."""
        with pytest.raises(RdfParseError):
            parse_rdf("<RDF><Content>", "a.zip")
