"""
Reference processing: dereference the URI, run the transform chain and digest
the resulting octets.

The transform chain works on a view of the document. The enveloped-signature
transform only adds an exclusion predicate used by the canonicalizer; nothing
is removed from the real tree.
"""
from dataclasses import dataclass, field
from typing import Tuple

from cryptography.hazmat.primitives import hashes
from lxml import etree

from dsig import algorithms
from dsig.internal.c14n import canonicalize
from exceptions.exceptions import DigestError, TransformError
from utils.logger import get_logger
from utils.utils import b64encode_str

log = get_logger()

ID_ATTRIBUTES = ("Id", "ID", "id")


@dataclass(frozen=True)
class Transform:
    algorithm: str
    inclusive_prefixes: Tuple[str, ...] = ()


DEFAULT_TRANSFORMS = (
    Transform(algorithms.ENVELOPED_SIGNATURE),
    Transform(algorithms.EXC_C14N),
)


@dataclass(frozen=True)
class ReferenceDescriptor:
    """What to sign: the whole document by default (URI="")."""
    uri: str = ""
    transforms: Tuple[Transform, ...] = DEFAULT_TRANSFORMS
    digest_method: str = algorithms.SHA256


@dataclass(frozen=True)
class Reference:
    uri: str
    transforms: Tuple[Transform, ...]
    digest_method: str
    digest_value: bytes = field(repr=False)

    @property
    def digest_value_b64(self) -> str:
        return b64encode_str(self.digest_value)


def is_signature_element(element) -> bool:
    return element.tag == algorithms.SIGNATURE_TAG


class _NodeSet:
    """A node plus the elements excluded from it."""

    def __init__(self, node):
        self.node = node
        self.exclude_signatures = False

    def excluded(self, element):
        return self.exclude_signatures and is_signature_element(element)


def dereference(document, uri: str = ""):
    """
    Resolve a same-document reference URI.

    '' is the whole document; '#id' is the element carrying that Id/ID/id.
    """
    tree = document if isinstance(document, etree._ElementTree) else document.getroottree()

    if uri == "":
        return tree

    if not uri.startswith("#") or len(uri) == 1:
        raise TransformError(f"Only same-document references are supported, got URI '{uri}'")

    target_id = uri[1:]
    matches = []
    for attribute in ID_ATTRIBUTES:
        matches.extend(tree.getroot().xpath(f"//*[@{attribute}=$value]", value=target_id))
    matches = list(dict.fromkeys(matches))

    if not matches:
        raise TransformError(f"Reference URI '{uri}' does not match any element")
    if len(matches) > 1:
        raise TransformError(f"Reference URI '{uri}' is ambiguous ({len(matches)} elements share the id)")
    return matches[0]


def get_hash_algorithm(digest_method: str) -> hashes.HashAlgorithm:
    try:
        return algorithms.DIGEST_METHODS[digest_method]()
    except KeyError:
        raise DigestError(f"Unsupported digest algorithm: {digest_method}") from None


def apply_transforms(node, transforms) -> bytes:
    """Run the transform chain in order and return the resulting octets."""
    node_set = _NodeSet(node)
    octets = None

    for transform in transforms:
        if transform.algorithm not in algorithms.TRANSFORMS:
            raise TransformError(f"Unsupported transform: {transform.algorithm}")
        if octets is not None:
            raise TransformError(
                f"Transform {transform.algorithm} expects a node-set but the chain already produced octets")

        if transform.algorithm == algorithms.ENVELOPED_SIGNATURE:
            node_set.exclude_signatures = True
        elif transform.algorithm == algorithms.EXC_C14N:
            octets = canonicalize(node_set.node, node_set.excluded, transform.inclusive_prefixes)

    if octets is None:
        raise TransformError("Transform chain must end with a canonicalization transform")
    return octets


def digest(node, transforms, digest_method: str = algorithms.SHA256) -> bytes:
    """
    Compute the DigestValue of a node-set.

    Raises:
        TransformError: unsupported or misordered transform
        DigestError: unsupported digest algorithm
    """
    hash_algorithm = get_hash_algorithm(digest_method)
    octets = apply_transforms(node, transforms)

    hasher = hashes.Hash(hash_algorithm)
    hasher.update(octets)
    return hasher.finalize()


def compute_reference(document, descriptor: ReferenceDescriptor = ReferenceDescriptor()) -> Reference:
    node = dereference(document, descriptor.uri)
    value = digest(node, descriptor.transforms, descriptor.digest_method)
    log.debug(f"Reference URI='{descriptor.uri}' digested: {b64encode_str(value)}")
    return Reference(
        uri=descriptor.uri,
        transforms=tuple(descriptor.transforms),
        digest_method=descriptor.digest_method,
        digest_value=value,
    )
