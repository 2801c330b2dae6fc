class XMLSignatureError(Exception):
    kind = 'XML Signature Error'

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return f'{self.kind} : {self.msg}'


class KeyLoadError(XMLSignatureError):
    """Raised when key material cannot be read from the keystore."""
    kind = 'Key Load Error'


class ParseError(XMLSignatureError):
    """Raised when the input document is not well-formed XML."""
    kind = 'Parse Error'


class CanonicalizationError(XMLSignatureError):
    """Raised when a node-set cannot be canonicalized."""
    kind = 'Canonicalization Error'


class TransformError(XMLSignatureError):
    """Raised when a reference transform is unsupported or misordered."""
    kind = 'Transform Error'


class DigestError(XMLSignatureError):
    """Raised when the digest algorithm is unsupported."""
    kind = 'Digest Error'


class SigningError(XMLSignatureError):
    """Raised when the key does not fit the signature method."""
    kind = 'Signing Error'


class SigningStateError(XMLSignatureError):
    """Raised when the signing pipeline skips or repeats a stage."""
    kind = 'Signing State Error'


class InsertionError(XMLSignatureError):
    """Raised when the signature cannot be attached to the document."""
    kind = 'Insertion Error'
