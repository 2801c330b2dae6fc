"""
Final output of signed documents.

Never used for canonicalization, and never pretty-printed: re-indenting a
signed document changes the signed content and breaks the signature.
"""
from lxml import etree


def serialize_xml(document, xml_declaration=True) -> bytes:
    if not isinstance(document, etree._ElementTree):
        document = document.getroottree()
    return etree.tostring(document, xml_declaration=xml_declaration, encoding="UTF-8", pretty_print=False)


def write_xml_file(document, path):
    with open(path, "wb") as f:
        f.write(serialize_xml(document))
    return path
