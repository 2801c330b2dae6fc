from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from dsig import algorithms
from exceptions.exceptions import SigningError
from utils.utils import int_to_bytes

_KEY_TYPES = {
    algorithms.RSA: rsa.RSAPrivateKey,
    algorithms.ECDSA: ec.EllipticCurvePrivateKey,
}


def sign(private_key, data: bytes, signature_method: str = algorithms.RSA_SHA256) -> bytes:
    """
    Compute the SignatureValue over canonical SignedInfo bytes.

    RSA methods use PKCS#1 v1.5 padding. ECDSA values are returned as the
    fixed-size r || s concatenation required by XML-DSig, not DER.

    Raises:
        SigningError: unknown method, or a key that does not fit the method
    """
    try:
        family, hash_class = algorithms.SIGNATURE_METHODS[signature_method]
    except KeyError:
        raise SigningError(f"Unsupported signature method: {signature_method}") from None

    if not isinstance(private_key, _KEY_TYPES[family]):
        raise SigningError(
            f"Signature method {signature_method} needs an {family.upper()} private key, "
            f"got {type(private_key).__name__}")

    try:
        if family == algorithms.RSA:
            return private_key.sign(data, padding.PKCS1v15(), hash_class())

        der = private_key.sign(data, ec.ECDSA(hash_class()))
    except ValueError as e:
        raise SigningError(f"Signing with {signature_method} failed: {e}") from e

    r, s = decode_dss_signature(der)
    size = (private_key.curve.key_size + 7) // 8
    return int_to_bytes(r, size) + int_to_bytes(s, size)
