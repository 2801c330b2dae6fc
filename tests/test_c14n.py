import tempfile
from pathlib import Path

import pytest
from lxml import etree

from dsig.internal.c14n import canonicalize, escape_attribute, escape_text
from exceptions.exceptions import CanonicalizationError, ParseError
from xml_io.parser import parse_xml

# Documents compared against libxml2's exclusive canonicalization
CORPUS = [
    b'<root xmlns="urn:t"><child>hi</child></root>',
    b'<a:root xmlns:a="urn:a" xmlns:b="urn:b" xmlns:unused="urn:u">'
    b'<b:child b:attr="1" z="2" a="3">x</b:child></a:root>',
    b'<r attr="a&amp;b&lt;c&quot;d&#9;e&#10;f&#13;">t&amp;&lt;&gt;&#13;</r>',
    b'<?xml version="1.0"?>\n<?pi data?>\n<!-- c -->\n<r><!-- inside --><?inner?>text</r>\n<?post x?>',
    b'<r xmlns="urn:d"><c xmlns="">x</c><d xml:lang="en"/></r>',
    b'<r><e/><f></f></r>',
    b'<r>\n  <a>  spaced  </a>\n</r>',
    b'<r><![CDATA[a<b]]></r>',
    b'<p:r xmlns:p="urn:1"><p:c xmlns:p="urn:2"/></p:r>',
    b'<doc xmlns="urn:doc" xmlns:x="urn:x"><item x:id="1" id="2"><x:sub/></item></doc>',
]


def lxml_exc_c14n(node):
    return etree.tostring(node, method="c14n", exclusive=True, with_comments=False)


class TestCanonicalize:

    @pytest.mark.parametrize("data", CORPUS)
    def test_matches_libxml2_for_documents(self, data):
        tree = parse_xml(data)
        assert canonicalize(tree) == lxml_exc_c14n(tree)

    @pytest.mark.parametrize("data", CORPUS)
    def test_matches_libxml2_for_subtrees(self, data):
        root = parse_xml(data).getroot()
        for element in root.iter(etree.Element):
            assert canonicalize(element) == lxml_exc_c14n(element)

    def test_simple_default_namespace(self):
        tree = parse_xml(b'<root xmlns="urn:t">\n<child  >hi</child></root>')
        assert canonicalize(tree) == b'<root xmlns="urn:t">\n<child>hi</child></root>'

    def test_attributes_sorted_by_namespace_then_local_name(self):
        tree = parse_xml(CORPUS[1])
        assert canonicalize(tree) == (
            b'<a:root xmlns:a="urn:a"><b:child xmlns:b="urn:b" a="3" z="2" b:attr="1">x</b:child></a:root>'
        )

    def test_unused_namespaces_are_not_rendered(self):
        tree = parse_xml(b'<r xmlns:u="urn:unused"><c/></r>')
        assert canonicalize(tree) == b'<r><c></c></r>'

    def test_namespace_rendered_once_per_output_ancestor(self):
        tree = parse_xml(b'<p:r xmlns:p="urn:p"><p:c><p:d/></p:c></p:r>')
        assert canonicalize(tree) == b'<p:r xmlns:p="urn:p"><p:c><p:d></p:d></p:c></p:r>'

    def test_subtree_pulls_in_only_utilized_ancestor_namespaces(self):
        root = parse_xml(b'<a:r xmlns:a="urn:a" xmlns="urn:d"><a:c><e/></a:c></a:r>').getroot()
        child = root[0]
        assert canonicalize(child) == b'<a:c xmlns:a="urn:a"><e xmlns="urn:d"></e></a:c>'

    def test_default_namespace_undeclared_only_under_rendered_default(self):
        root = parse_xml(CORPUS[4]).getroot()
        assert canonicalize(root) == b'<r xmlns="urn:d"><c xmlns="">x</c><d xml:lang="en"></d></r>'
        assert canonicalize(root[0]) == b'<c>x</c>'

    def test_top_level_processing_instructions_and_comments(self):
        tree = parse_xml(CORPUS[3])
        assert canonicalize(tree) == b'<?pi data?>\n<r><?inner?>text</r>\n<?post x?>'

    def test_escaping(self):
        assert escape_text('a&b<c>d\re"') == 'a&amp;b&lt;c&gt;d&#xD;e"'
        assert escape_attribute('a&b<c>d"\t\n\r') == 'a&amp;b&lt;c>d&quot;&#x9;&#xA;&#xD;'

    def test_crlf_in_source_collapses_to_lf(self):
        tree = parse_xml(b'<r>line1\r\nline2\rline3</r>')
        assert canonicalize(tree) == b'<r>line1\nline2\nline3</r>'

    def test_exclude_keeps_tail_text(self):
        tree = parse_xml(b'<r>a<x>gone</x>b<y/></r>')
        result = canonicalize(tree, exclude=lambda e: e.tag == "x")
        assert result == b'<r>ab<y></y></r>'

    def test_inclusive_prefixes(self):
        root = parse_xml(b'<r xmlns:p="urn:p" xmlns="urn:d"><c/></r>').getroot()
        assert canonicalize(root[0], inclusive_prefixes=["p"]) == b'<c xmlns="urn:d" xmlns:p="urn:p"></c>'
        assert canonicalize(root[0], inclusive_prefixes=["#default", "missing"]) == b'<c xmlns="urn:d"></c>'

    def test_utf8_output(self):
        tree = parse_xml('<r a="é">ü€</r>'.encode("utf-8"))
        assert canonicalize(tree) == '<r a="é">ü€</r>'.encode("utf-8")

    def test_idempotent(self):
        for data in CORPUS:
            once = canonicalize(parse_xml(data))
            assert canonicalize(parse_xml(once)) == once

    def test_does_not_mutate_tree(self):
        tree = parse_xml(CORPUS[1])
        before = etree.tostring(tree)
        canonicalize(tree, exclude=lambda e: True)
        assert etree.tostring(tree) == before

    def test_internal_entities_are_expanded(self):
        tree = parse_xml(b'<!DOCTYPE r [<!ENTITY e "value">]><r a="x&e;y">&e;</r>')
        assert canonicalize(tree) == b'<r a="xvaluey">value</r>'
        assert canonicalize(tree) == etree.tostring(tree, method="c14n", exclusive=True)

    def test_external_entity_is_never_loaded(self):
        secret = Path(tempfile.mkdtemp()) / "secret.txt"
        secret.write_text("do-not-sign")
        data = (f'<!DOCTYPE r [<!ENTITY x SYSTEM "{secret.as_uri()}">]><r>&x;</r>').encode()

        with pytest.raises((ParseError, CanonicalizationError)):
            canonicalize(parse_xml(data))

    def test_entity_node_is_rejected(self):
        root = etree.Element("r")
        root.append(etree.Entity("custom"))
        with pytest.raises(CanonicalizationError):
            canonicalize(root)

    def test_unsupported_input_is_rejected(self):
        with pytest.raises(CanonicalizationError):
            canonicalize(etree.Comment("not an element"))
