"""
Namespace-aware XML parsing for documents to be signed.

Whitespace, comments and processing instructions are kept as they are in the
input: the signature covers the document exactly as parsed. Entities declared
in the internal DTD subset are expanded; external entities, external DTDs and
network resources are never loaded.
"""
from pathlib import Path

from lxml import etree

from exceptions.exceptions import ParseError


def get_parser():
    return etree.XMLParser(
        remove_blank_text=False,
        remove_comments=False,
        remove_pis=False,
        resolve_entities="internal",
        load_dtd=False,
        no_network=True,
        huge_tree=False,
    )


def parse_xml(data: bytes):
    """Parse bytes into an lxml ElementTree, raising ParseError on malformed input."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        root = etree.fromstring(data, parser=get_parser())
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Malformed XML document: {e}") from e
    if root is None:
        raise ParseError("Empty XML document")
    return root.getroottree()


def parse_xml_file(path):
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ParseError(f"Cannot read {path}: {e}") from e
    return parse_xml(data)
