"""
XML Signature Commands

This module provides high-level, file-based commands around the signing core.
All file I/O (keystore, input document, output document) happens here, before
and after the signing pipeline runs.
"""
from pathlib import Path
from typing import Optional

from dsig.config import DEFAULT_CONFIG, SigningConfig
from dsig.internal.reference import compute_reference
from dsig.signature_service import get_signature_service
from keystore.generate_self_signed import generate_keystore
from keystore.key_provider import load_key_pair
from utils.logger import get_logger
from xml_io.parser import parse_xml_file
from xml_io.serializer import serialize_xml

log = get_logger()


def sign_xml_file(
    input_path: str,
    keystore_path: str,
    output_path: Optional[str] = None,
    storepass: Optional[str] = None,
    alias: Optional[str] = None,
    keypass: Optional[str] = None,
    config: Optional[SigningConfig] = None,
) -> bytes:
    """
    Sign an XML file with an enveloped signature.

    The key pair is loaded before the document is read, so a keystore problem
    never gets as far as the document.

    Args:
        input_path (str): XML document to sign
        keystore_path (str): PKCS#12 or PEM keystore
        output_path (str, optional): where to write the signed document
        storepass (str, optional): keystore password
        alias (str, optional): key alias in the keystore
        keypass (str, optional): private key password
        config (SigningConfig, optional): algorithms and placement

    Returns:
        bytes: the signed document
    """
    key_pair = load_key_pair(keystore_path, storepass, alias, keypass)
    document = parse_xml_file(input_path)

    get_signature_service(config).sign(document, key_pair)
    signed = serialize_xml(document)

    if output_path is not None:
        Path(output_path).write_bytes(signed)
        log.info(f"Signed document written: {output_path}")
    return signed


def digest_xml_file(input_path: str, config: Optional[SigningConfig] = None) -> str:
    """
    Compute the base64 reference digest of an XML file.

    Signatures already present are excluded, so for a signed file this is the
    DigestValue a verifier expects to find in it.
    """
    config = config or DEFAULT_CONFIG
    document = parse_xml_file(input_path)
    reference = compute_reference(document, config.reference_descriptor())
    return reference.digest_value_b64


def create_keystore(keystore_path: str, password: str, alias: str, years: int = 1,
                    key_size: int = 2048, pem_path: Optional[str] = None) -> Path:
    """
    Generate a self-signed signing identity in a PKCS#12 keystore.

    Returns:
        Path: the keystore path
    """
    return generate_keystore(keystore_path, password, alias, years=years, key_size=key_size, pem_path=pem_path)
