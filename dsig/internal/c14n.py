"""
Exclusive XML Canonicalization 1.0 (without comments).

Implements http://www.w3.org/TR/xml-exc-c14n/ over lxml trees:
- elements in document order, empty elements as start/end tag pairs
- namespace declarations first (default namespace first, then by prefix),
  attributes after, sorted by (namespace URI, local name)
- a namespace is declared only where it is visibly utilized and not already
  rendered with the same value by the nearest output ancestor
- comments are dropped, processing instructions are kept

The bytes produced here are what gets digested and signed; they do not depend
on any lxml serializer option.
"""
from typing import Callable, Iterable, Optional

from lxml import etree

from dsig.algorithms import XML_NS
from exceptions.exceptions import CanonicalizationError

DEFAULT_PREFIX = "#default"


def canonicalize(node, exclude: Optional[Callable] = None, inclusive_prefixes: Iterable[str] = ()) -> bytes:
    """
    Serialize a node-set into its exclusive canonical form.

    Args:
        node: lxml ElementTree (whole document) or Element (its subtree)
        exclude: predicate called on every descendant element; elements for
            which it returns True are left out together with their subtree
        inclusive_prefixes: InclusiveNamespaces PrefixList; '#default' stands
            for the default namespace

    Returns:
        bytes: UTF-8 canonical form

    Raises:
        CanonicalizationError: unsupported node or unresolvable namespace
    """
    inclusive = tuple('' if p == DEFAULT_PREFIX else p for p in inclusive_prefixes)
    writer = _C14NWriter(exclude, inclusive)

    if isinstance(node, etree._ElementTree):
        writer.write_document(node)
    elif isinstance(node, etree._Element) and isinstance(node.tag, str):
        writer.write_element(node, {}, apex=True)
    else:
        raise CanonicalizationError(f"Cannot canonicalize node of type {type(node).__name__}")

    return "".join(writer.parts).encode("utf-8")


def escape_text(text: str) -> str:
    return (text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace("\r", "&#xD;"))


def escape_attribute(value: str) -> str:
    return (value.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace('"', "&quot;")
            .replace("\t", "&#x9;")
            .replace("\n", "&#xA;")
            .replace("\r", "&#xD;"))


def split_name(name: str):
    """'{uri}local' -> ('uri', 'local'); 'local' -> ('', 'local')"""
    if name.startswith("{"):
        uri, local = name[1:].split("}", 1)
        return uri, local
    return "", name


class _C14NWriter:

    def __init__(self, exclude, inclusive_prefixes):
        self.exclude = exclude
        self.inclusive_prefixes = inclusive_prefixes
        self.parts = []

    def write_document(self, tree):
        root = tree.getroot()
        for sibling in reversed(list(root.itersiblings(preceding=True))):
            if sibling.tag is etree.PI:
                self.write_pi(sibling)
                self.parts.append("\n")
            else:
                self.check_supported(sibling)
        self.write_element(root, {}, apex=True)
        for sibling in root.itersiblings():
            if sibling.tag is etree.PI:
                self.parts.append("\n")
                self.write_pi(sibling)
            else:
                self.check_supported(sibling)

    def write_element(self, element, rendered, apex=False):
        if not apex and self.exclude is not None and self.exclude(element):
            return

        qname = self.qualified_name(element)
        declarations, rendered = self.namespace_declarations(element, rendered)
        attributes = self.sorted_attributes(element)

        out = self.parts
        out.append("<" + qname)
        for prefix, uri in declarations:
            name = "xmlns" if prefix == "" else "xmlns:" + prefix
            out.append(f' {name}="{escape_attribute(uri)}"')
        for name, value in attributes:
            out.append(f' {name}="{escape_attribute(value)}"')
        out.append(">")

        if element.text:
            out.append(escape_text(element.text))

        for child in element:
            if isinstance(child.tag, str):
                self.write_element(child, rendered)
            elif child.tag is etree.PI:
                self.write_pi(child)
            else:
                self.check_supported(child)
            if child.tail:
                out.append(escape_text(child.tail))

        out.append(f"</{qname}>")

    def write_pi(self, pi):
        target = pi.target
        data = pi.text or ""
        if not target or target.lower() == "xml" or "?>" in data:
            raise CanonicalizationError(f"Malformed processing instruction: {target!r}")
        if data:
            self.parts.append(f"<?{target} {data}?>")
        else:
            self.parts.append(f"<?{target}?>")

    @staticmethod
    def check_supported(node):
        if node.tag is etree.Comment:
            return
        raise CanonicalizationError(f"Unsupported node in node-set: {type(node).__name__}")

    @staticmethod
    def qualified_name(element):
        _, local = split_name(element.tag)
        if element.prefix:
            return f"{element.prefix}:{local}"
        return local

    def namespace_declarations(self, element, rendered):
        """Return (declarations to emit, namespaces rendered for descendants)."""
        uri, _ = split_name(element.tag)
        utilized = {element.prefix or "": uri}

        for name in element.attrib:
            attr_uri, _ = split_name(name)
            if attr_uri and attr_uri != XML_NS:
                utilized.setdefault(self.attribute_prefix(element, attr_uri), attr_uri)

        nsmap = element.nsmap
        for prefix in self.inclusive_prefixes:
            in_scope = nsmap.get(prefix or None)
            if in_scope is not None:
                utilized.setdefault(prefix, in_scope)
            elif prefix == "":
                utilized.setdefault("", "")

        declarations = []
        updated = None
        for prefix in sorted(utilized):
            value = utilized[prefix]
            already = rendered.get(prefix, "" if prefix == "" else None)
            if already == value:
                continue
            declarations.append((prefix, value))
            if updated is None:
                updated = dict(rendered)
            updated[prefix] = value

        return declarations, (rendered if updated is None else updated)

    @staticmethod
    def attribute_prefix(element, uri):
        candidates = sorted(p for p, u in element.nsmap.items() if p is not None and u == uri)
        if not candidates:
            raise CanonicalizationError(
                f"No namespace prefix in scope for attribute namespace '{uri}' on <{element.tag}>")
        # lxml does not keep the prefix an attribute was written with; when several
        # prefixes are bound to the same URI the smallest one is used.
        return candidates[0]

    def sorted_attributes(self, element):
        keyed = []
        for name, value in element.attrib.items():
            uri, local = split_name(name)
            if not uri:
                rendered_name = local
            elif uri == XML_NS:
                rendered_name = "xml:" + local
            else:
                rendered_name = f"{self.attribute_prefix(element, uri)}:{local}"
            keyed.append(((uri, local), rendered_name, value))
        keyed.sort(key=lambda item: item[0])
        return [(name, value) for _, name, value in keyed]
