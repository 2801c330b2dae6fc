"""
Algorithm identifiers of the W3C XML Signature recommendation.

Only the identifiers this project can produce are listed; anything else is
rejected by the component that receives it.
"""
from cryptography.hazmat.primitives import hashes

DSIG_NS = "http://www.w3.org/2000/09/xmldsig#"
DSIG11_NS = "http://www.w3.org/2009/xmldsig11#"
EXC_C14N_NS = "http://www.w3.org/2001/10/xml-exc-c14n#"
XML_NS = "http://www.w3.org/XML/1998/namespace"

SIGNATURE_TAG = f"{{{DSIG_NS}}}Signature"

# Canonicalization
EXC_C14N = "http://www.w3.org/2001/10/xml-exc-c14n#"
CANONICALIZATION_METHODS = (EXC_C14N,)

# Transforms
ENVELOPED_SIGNATURE = "http://www.w3.org/2000/09/xmldsig#enveloped-signature"
TRANSFORMS = (ENVELOPED_SIGNATURE, EXC_C14N)

# Digests
SHA1 = "http://www.w3.org/2000/09/xmldsig#sha1"
SHA224 = "http://www.w3.org/2001/04/xmldsig-more#sha224"
SHA256 = "http://www.w3.org/2001/04/xmlenc#sha256"
SHA384 = "http://www.w3.org/2001/04/xmldsig-more#sha384"
SHA512 = "http://www.w3.org/2001/04/xmlenc#sha512"

DIGEST_METHODS = {
    SHA1: hashes.SHA1,
    SHA224: hashes.SHA224,
    SHA256: hashes.SHA256,
    SHA384: hashes.SHA384,
    SHA512: hashes.SHA512,
}

# Signatures: URI -> (key family, hash)
RSA_SHA1 = "http://www.w3.org/2000/09/xmldsig#rsa-sha1"
RSA_SHA224 = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha224"
RSA_SHA256 = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha256"
RSA_SHA384 = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha384"
RSA_SHA512 = "http://www.w3.org/2001/04/xmldsig-more#rsa-sha512"
ECDSA_SHA1 = "http://www.w3.org/2001/04/xmldsig-more#ecdsa-sha1"
ECDSA_SHA224 = "http://www.w3.org/2001/04/xmldsig-more#ecdsa-sha224"
ECDSA_SHA256 = "http://www.w3.org/2001/04/xmldsig-more#ecdsa-sha256"
ECDSA_SHA384 = "http://www.w3.org/2001/04/xmldsig-more#ecdsa-sha384"
ECDSA_SHA512 = "http://www.w3.org/2001/04/xmldsig-more#ecdsa-sha512"

RSA = "rsa"
ECDSA = "ecdsa"

SIGNATURE_METHODS = {
    RSA_SHA1: (RSA, hashes.SHA1),
    RSA_SHA224: (RSA, hashes.SHA224),
    RSA_SHA256: (RSA, hashes.SHA256),
    RSA_SHA384: (RSA, hashes.SHA384),
    RSA_SHA512: (RSA, hashes.SHA512),
    ECDSA_SHA1: (ECDSA, hashes.SHA1),
    ECDSA_SHA224: (ECDSA, hashes.SHA224),
    ECDSA_SHA256: (ECDSA, hashes.SHA256),
    ECDSA_SHA384: (ECDSA, hashes.SHA384),
    ECDSA_SHA512: (ECDSA, hashes.SHA512),
}

_SHORT_NAMES = {
    "exc-c14n": EXC_C14N,
    "enveloped-signature": ENVELOPED_SIGNATURE,
    "sha1": SHA1,
    "sha224": SHA224,
    "sha256": SHA256,
    "sha384": SHA384,
    "sha512": SHA512,
    "rsa-sha1": RSA_SHA1,
    "rsa-sha224": RSA_SHA224,
    "rsa-sha256": RSA_SHA256,
    "rsa-sha384": RSA_SHA384,
    "rsa-sha512": RSA_SHA512,
    "ecdsa-sha1": ECDSA_SHA1,
    "ecdsa-sha224": ECDSA_SHA224,
    "ecdsa-sha256": ECDSA_SHA256,
    "ecdsa-sha384": ECDSA_SHA384,
    "ecdsa-sha512": ECDSA_SHA512,
}


def resolve_algorithm(name_or_uri: str) -> str:
    """Map a short name such as 'rsa-sha256' to its URI; URIs pass through unchanged."""
    return _SHORT_NAMES.get(name_or_uri.lower(), name_or_uri)
