"""
    Generates a self-signed signing identity and stores it in a PKCS#12 keystore.
    The keystore entry carries:
        - an RSA private key (2048 bits by default)
        - a self-signed certificate valid for the requested number of years
        - the alias as PKCS#12 friendly name, so that load_key_pair(..., key_alias=alias) finds it
    A PEM copy (private key followed by certificate) can be written next to it.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from utils.logger import get_logger

log = get_logger()


def gen_key(key_size=2048):
    return rsa.generate_private_key(public_exponent=65537, key_size=key_size)


def build_cert(common_name, key, validity_days):
    name = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "genxmldsig"),
    ])
    now = datetime.now(timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=validity_days))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(x509.KeyUsage(
            digital_signature=True,
            content_commitment=True,
            key_encipherment=False,
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=False,
            crl_sign=False,
            encipher_only=False,
            decipher_only=False,
        ), critical=True)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
    )
    return builder.sign(key, hashes.SHA256())


def write_pem(path, cert, key):
    with open(path, "wb") as f:
        f.write(key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        ))
        f.write(cert.public_bytes(serialization.Encoding.PEM))


def generate_keystore(path, password, alias, years=1, key_size=2048, pem_path=None):
    """
    Create a PKCS#12 keystore holding a fresh key and self-signed certificate.

    Args:
        path: keystore file to write (.p12)
        password: keystore password
        alias: friendly name of the key entry
        years: certificate validity
        key_size: RSA modulus size in bits
        pem_path: optional unencrypted PEM copy

    Returns:
        Path: the keystore path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    key = gen_key(key_size)
    cert = build_cert(alias, key, 365 * years)

    encryption = serialization.BestAvailableEncryption(password.encode("utf-8"))
    path.write_bytes(pkcs12.serialize_key_and_certificates(alias.encode("utf-8"), key, cert, None, encryption))
    log.info(f"Keystore generated : {path} (alias '{alias}', {key_size} bits, {years} year(s))")

    if pem_path is not None:
        write_pem(pem_path, cert, key)
        log.info(f"PEM copy written : {pem_path}")

    return path
