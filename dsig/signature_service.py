"""
Enveloped Signature Service - complete workflow for signing an XML document.

This service orchestrates the signing pipeline:
1. Reference digest over the document (enveloped-signature + exclusive c14n)
2. SignedInfo assembly and canonicalization
3. Signature value computation with the private key
4. KeyInfo construction from the public key
5. Removal of stale signatures and insertion of the new one

The caller's document is only mutated in step 5, so a failure in any earlier
step leaves it untouched.
"""
from enum import Enum
from typing import Optional

from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from dsig.config import DEFAULT_CONFIG, SigningConfig
from dsig.internal import assembler, signed_info as signed_info_builder
from dsig.internal.key_info import build_key_info
from dsig.internal.reference import compute_reference
from dsig.internal.signer import sign
from exceptions.exceptions import SigningError, SigningStateError
from utils.logger import get_logger

log = get_logger()


class SigningState(Enum):
    INITIALIZED = 0
    REFERENCES_DIGESTED = 1
    SIGNED_INFO_CANONICALIZED = 2
    SIGNED = 3
    ASSEMBLED = 4


class SigningContext:
    """Per-call pipeline state. Never shared between signing operations."""

    def __init__(self):
        self.state = SigningState.INITIALIZED
        self.reference = None
        self.signed_info_c14n = None
        self.signature_value = None

    def advance(self, state: SigningState):
        if state.value != self.state.value + 1:
            raise SigningStateError(f"Invalid signing state transition {self.state.name} -> {state.name}")
        log.debug(f"Signing state: {self.state.name} -> {state.name}")
        self.state = state


def _public_key_of(key_pair):
    private_key = key_pair.private_key
    public_key = key_pair.public_key
    if private_key is None:
        raise SigningError("Key pair has no private key")
    if public_key is None:
        return private_key.public_key()

    if _spki(public_key) != _spki(private_key.public_key()):
        raise SigningError("Public key does not belong to the private key")
    return public_key


def _spki(public_key) -> bytes:
    return public_key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)


class EnvelopedSignatureService:
    """Signs XML documents with an enveloped XML-DSig signature."""

    def __init__(self, config: Optional[SigningConfig] = None):
        """
        Initialize the signature service.

        Args:
            config: algorithm identifiers and placement rules (defaults to
                exclusive c14n, RSA-SHA256 and SHA-256 over URI="")
        """
        self.config = config or DEFAULT_CONFIG

    def sign(self, document, key_pair, insertion_point=None):
        """
        Sign `document` in place and return it.

        Args:
            document: lxml ElementTree (or an element of it)
            key_pair: KeyPair (public_key, private_key[, certificate]); borrowed
                for the duration of the call only
            insertion_point: element receiving the Signature (document root by default)

        Returns:
            the same document, now carrying exactly one new Signature element

        Raises:
            CanonicalizationError, TransformError, DigestError, SigningError,
            InsertionError: the document is left unmodified
        """
        config = self.config
        context = SigningContext()
        public_key = _public_key_of(key_pair)

        context.reference = compute_reference(document, config.reference_descriptor())
        context.advance(SigningState.REFERENCES_DIGESTED)

        signed_info = signed_info_builder.build(
            config.canonicalization_method,
            config.signature_method,
            [context.reference],
            config.inclusive_prefixes,
        )
        signed_info_element = signed_info.to_element()
        target = assembler.resolve_insertion_point(document, insertion_point)
        context.signed_info_c14n = signed_info_builder.canonicalize_signed_info(signed_info_element, target)
        context.advance(SigningState.SIGNED_INFO_CANONICALIZED)

        context.signature_value = sign(key_pair.private_key, context.signed_info_c14n, config.signature_method)
        context.advance(SigningState.SIGNED)

        signature_element = assembler.build_signature_element(
            signed_info_element,
            context.signature_value,
            build_key_info(public_key),
        )
        assembler.apply(document, signature_element, insertion_point, config.removal_scope)
        context.advance(SigningState.ASSEMBLED)

        log.debug(f"Document signed, DigestValue={context.reference.digest_value_b64}")
        return document


def sign_enveloped(document, key_pair, config: Optional[SigningConfig] = None, insertion_point=None):
    """Sign `document` with an enveloped signature; see EnvelopedSignatureService.sign."""
    return EnvelopedSignatureService(config).sign(document, key_pair, insertion_point)


def get_signature_service(config: Optional[SigningConfig] = None) -> EnvelopedSignatureService:
    """Get an EnvelopedSignatureService instance."""
    return EnvelopedSignatureService(config)
