import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from lxml import etree

from dsig.algorithms import DSIG11_NS, DSIG_NS
from dsig.internal.key_info import build_key_info
from exceptions.exceptions import SigningError


def b64_to_int(text):
    return int.from_bytes(base64.b64decode(text), "big")


class TestBuildKeyInfo:

    def test_rsa_key_value(self, rsa_key_pair):
        key_info = build_key_info(rsa_key_pair.public_key)
        numbers = rsa_key_pair.public_key.public_numbers()

        assert key_info.tag == f"{{{DSIG_NS}}}KeyInfo"
        assert b64_to_int(key_info.findtext(f".//{{{DSIG_NS}}}Modulus")) == numbers.n
        assert key_info.findtext(f".//{{{DSIG_NS}}}Exponent") == "AQAB"

    def test_rsa_modulus_has_no_leading_zero(self, rsa_key_pair):
        key_info = build_key_info(rsa_key_pair.public_key)
        modulus = base64.b64decode(key_info.findtext(f".//{{{DSIG_NS}}}Modulus"))
        assert len(modulus) == 256
        assert modulus[0] != 0

    def test_ec_key_value(self, ec_key_pair):
        key_info = build_key_info(ec_key_pair.public_key)

        curve = key_info.find(f".//{{{DSIG11_NS}}}NamedCurve")
        assert curve.get("URI") == "urn:oid:1.2.840.10045.3.1.7"
        point = base64.b64decode(key_info.findtext(f".//{{{DSIG11_NS}}}PublicKey"))
        assert point == ec_key_pair.public_key.public_bytes(
            serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint)

    def test_appended_to_parent(self, rsa_key_pair):
        parent = etree.Element(f"{{{DSIG_NS}}}Signature", nsmap={None: DSIG_NS})
        key_info = build_key_info(rsa_key_pair.public_key, parent)
        assert key_info.getparent() is parent

    def test_unsupported_key(self):
        with pytest.raises(SigningError):
            build_key_info(ed25519.Ed25519PrivateKey.generate().public_key())
