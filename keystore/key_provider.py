"""
Key provider - loads the signing key pair from a keystore.

Supported stores:
- PKCS#12 (.p12, .pfx): one password protects the store and the key; the
  alias is the friendly name of the key's certificate
- PEM: a private key, optionally followed by its certificate
"""
import re
from pathlib import Path
from typing import NamedTuple, Optional

from cryptography import x509
from cryptography.hazmat.primitives.serialization import load_pem_private_key, pkcs12

from exceptions.exceptions import KeyLoadError
from utils.logger import get_logger

log = get_logger()

PKCS12_SUFFIXES = (".p12", ".pfx")
# first block of each label wins
PEM_BLOCK = re.compile(rb"-----BEGIN ([A-Z0-9 ]+)-----.+?-----END \1-----", re.DOTALL)


class KeyPair(NamedTuple):
    public_key: object
    private_key: object
    certificate: Optional[x509.Certificate] = None


def _to_bytes(credential):
    if credential is None or isinstance(credential, bytes):
        return credential
    return credential.encode("utf-8")


def load_key_pair(store_location, store_credential=None, key_alias=None, key_credential=None) -> KeyPair:
    """
    Load the key pair used for signing.

    Args:
        store_location: path of the PKCS#12 or PEM keystore
        store_credential: keystore password
        key_alias: PKCS#12 friendly name of the key entry (ignored for PEM)
        key_credential: private key password

    Returns:
        KeyPair

    Raises:
        KeyLoadError: missing store, bad credential, unknown alias or no key
    """
    path = Path(store_location)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise KeyLoadError(f"Cannot read keystore {store_location}: {e}") from e

    if path.suffix.lower() in PKCS12_SUFFIXES:
        key_pair = _load_pkcs12(data, store_credential, key_alias, key_credential)
    else:
        key_pair = _load_pem(data, key_credential if key_credential is not None else store_credential)

    log.info(f"Loaded {type(key_pair.private_key).__name__} from {path.name}")
    return key_pair


def _load_pkcs12(data, store_credential, key_alias, key_credential) -> KeyPair:
    password = _to_bytes(store_credential)
    if key_credential is not None and _to_bytes(key_credential) != password:
        raise KeyLoadError("PKCS#12 keystores use a single password; key password differs from store password")

    try:
        store = pkcs12.load_pkcs12(data, password)
    except (ValueError, TypeError) as e:
        raise KeyLoadError(f"Cannot open PKCS#12 keystore: {e}") from e

    if store.key is None:
        raise KeyLoadError("PKCS#12 keystore holds no private key")

    certificate = store.cert.certificate if store.cert is not None else None
    if key_alias is not None:
        friendly_name = store.cert.friendly_name if store.cert is not None else None
        if friendly_name is None or friendly_name.decode("utf-8") != key_alias:
            raise KeyLoadError(f"Alias '{key_alias}' not found in keystore")

    public_key = certificate.public_key() if certificate is not None else store.key.public_key()
    return KeyPair(public_key, store.key, certificate)


def _pem_blocks(data):
    return {m.group(1): m.group(0) for m in reversed(list(PEM_BLOCK.finditer(data)))}


def _load_pem(data, password) -> KeyPair:
    blocks = _pem_blocks(data)
    key_block = next((block for label, block in blocks.items() if label.endswith(b"PRIVATE KEY")), None)
    if key_block is None:
        raise KeyLoadError("PEM file holds no private key")

    try:
        private_key = load_pem_private_key(key_block, password=_to_bytes(password))
    except (ValueError, TypeError) as e:
        raise KeyLoadError(f"Cannot load PEM private key: {e}") from e

    certificate = None
    if b"CERTIFICATE" in blocks:
        try:
            certificate = x509.load_pem_x509_certificate(blocks[b"CERTIFICATE"])
        except ValueError as e:
            raise KeyLoadError(f"Cannot load PEM certificate: {e}") from e

    return KeyPair(private_key.public_key(), private_key, certificate)
