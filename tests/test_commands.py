"""
Tests for commands.py - file-based signing, digest and keystore commands.
"""
import hashlib
import base64
import tempfile
from pathlib import Path

import pytest

from commands import create_keystore, digest_xml_file, sign_xml_file
from dsig import algorithms
from dsig.config import SigningConfig
from exceptions.exceptions import KeyLoadError, ParseError
from xml_io.parser import parse_xml

DOCUMENT = b'<root xmlns="urn:t"><child>hi</child></root>'


@pytest.fixture(scope="module")
def workspace():
    temp_dir = Path(tempfile.mkdtemp())
    create_keystore(str(temp_dir / "envelope.p12"), "my-password", "envelope")
    (temp_dir / "document.xml").write_bytes(DOCUMENT)
    return temp_dir


def stored_digest(signed):
    root = parse_xml(signed).getroot()
    return root.findtext(f".//{{{algorithms.DSIG_NS}}}DigestValue")


class TestSignXmlFile:

    def test_writes_output(self, workspace):
        output = workspace / "signed.xml"
        signed = sign_xml_file(str(workspace / "document.xml"), str(workspace / "envelope.p12"),
                               output_path=str(output), storepass="my-password", alias="envelope")

        assert output.read_bytes() == signed
        assert signed.startswith(b"<?xml")
        assert stored_digest(signed) == base64.b64encode(hashlib.sha256(DOCUMENT).digest()).decode()

    def test_input_untouched(self, workspace):
        sign_xml_file(str(workspace / "document.xml"), str(workspace / "envelope.p12"), storepass="my-password")
        assert (workspace / "document.xml").read_bytes() == DOCUMENT

    def test_wrong_password(self, workspace):
        with pytest.raises(KeyLoadError):
            sign_xml_file(str(workspace / "document.xml"), str(workspace / "envelope.p12"), storepass="nope")

    def test_malformed_document(self, workspace):
        bad = workspace / "bad.xml"
        bad.write_bytes(b"<root>")
        with pytest.raises(ParseError):
            sign_xml_file(str(bad), str(workspace / "envelope.p12"), storepass="my-password")


class TestDigestXmlFile:

    def test_unsigned_document(self, workspace):
        expected = base64.b64encode(hashlib.sha256(DOCUMENT).digest()).decode()
        assert digest_xml_file(str(workspace / "document.xml")) == expected

    def test_matches_stored_digest_of_signed_document(self, workspace):
        output = workspace / "signed-for-digest.xml"
        signed = sign_xml_file(str(workspace / "document.xml"), str(workspace / "envelope.p12"),
                               output_path=str(output), storepass="my-password")
        assert digest_xml_file(str(output)) == stored_digest(signed)

    def test_other_digest(self, workspace):
        value = digest_xml_file(str(workspace / "document.xml"), SigningConfig.from_names(digest="sha1"))
        assert base64.b64decode(value) == hashlib.sha1(DOCUMENT).digest()
