"""
KeyInfo carrying the signer's public key as a KeyValue.

RSA keys are written as RSAKeyValue (Modulus, Exponent); EC keys as the
XML-DSig 1.1 ECKeyValue (named curve + uncompressed point).
"""
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from lxml import etree

from dsig.algorithms import DSIG11_NS, DSIG_NS
from exceptions.exceptions import SigningError
from utils.utils import b64encode_str, int_to_b64

CURVE_OIDS = {
    "secp256r1": "1.2.840.10045.3.1.7",
    "secp384r1": "1.3.132.0.34",
    "secp521r1": "1.3.132.0.35",
}


def ds(tag):
    return f"{{{DSIG_NS}}}{tag}"


def dsig11(tag):
    return f"{{{DSIG11_NS}}}{tag}"


def build_key_info(public_key, parent=None):
    if parent is None:
        key_info = etree.Element(ds("KeyInfo"), nsmap={None: DSIG_NS})
    else:
        key_info = etree.SubElement(parent, ds("KeyInfo"))
    key_value = etree.SubElement(key_info, ds("KeyValue"))

    if isinstance(public_key, rsa.RSAPublicKey):
        numbers = public_key.public_numbers()
        rsa_key_value = etree.SubElement(key_value, ds("RSAKeyValue"))
        etree.SubElement(rsa_key_value, ds("Modulus")).text = int_to_b64(numbers.n)
        etree.SubElement(rsa_key_value, ds("Exponent")).text = int_to_b64(numbers.e)

    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        oid = CURVE_OIDS.get(public_key.curve.name)
        if oid is None:
            raise SigningError(f"Unsupported elliptic curve for KeyValue: {public_key.curve.name}")
        ec_key_value = etree.SubElement(key_value, dsig11("ECKeyValue"), nsmap={"dsig11": DSIG11_NS})
        etree.SubElement(ec_key_value, dsig11("NamedCurve"), URI=f"urn:oid:{oid}")
        point = public_key.public_bytes(serialization.Encoding.X962,
                                        serialization.PublicFormat.UncompressedPoint)
        etree.SubElement(ec_key_value, dsig11("PublicKey")).text = b64encode_str(point)

    else:
        raise SigningError(f"Cannot embed a {type(public_key).__name__} in KeyValue")

    return key_info
