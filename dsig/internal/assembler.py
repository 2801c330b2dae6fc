"""
Signature assembly and document mutation.

`apply` is the only function of the signing pipeline that touches the
caller's document. It runs last, once the signature value exists.
"""
from enum import Enum

from lxml import etree

from dsig.algorithms import DSIG_NS, SIGNATURE_TAG
from exceptions.exceptions import InsertionError
from utils.logger import get_logger
from utils.utils import b64encode_str

log = get_logger()


class RemovalScope(str, Enum):
    """
    Which pre-existing Signature elements are removed before insertion.

    DOCUMENT removes every XML-DSig Signature in the document; INSERTION_POINT
    only those that are direct children of the insertion point. Only elements
    in the http://www.w3.org/2000/09/xmldsig# namespace count as signatures:
    an application element that is merely named <Signature> is kept and is
    covered by the digest.
    """
    DOCUMENT = "document"
    INSERTION_POINT = "insertion-point"


def ds(tag):
    return f"{{{DSIG_NS}}}{tag}"


def build_signature_element(signed_info_element, signature_value: bytes, key_info_element):
    """<Signature> with SignedInfo, SignatureValue and KeyInfo, in that order."""
    signature = etree.Element(SIGNATURE_TAG, nsmap={None: DSIG_NS})
    signature.append(signed_info_element)
    etree.SubElement(signature, ds("SignatureValue")).text = b64encode_str(signature_value)
    signature.append(key_info_element)
    return signature


def root_of(document):
    if isinstance(document, etree._ElementTree):
        return document.getroot()
    return document.getroottree().getroot()


def find_stale_signatures(document, insertion_point, scope=RemovalScope.DOCUMENT):
    if RemovalScope(scope) is RemovalScope.INSERTION_POINT:
        return [child for child in insertion_point if child.tag == SIGNATURE_TAG]
    return list(root_of(document).iter(SIGNATURE_TAG))


def resolve_insertion_point(document, insertion_point=None):
    root = root_of(document)
    if insertion_point is None:
        return root

    if not any(node is root for node in insertion_point.iterancestors()) and insertion_point is not root:
        raise InsertionError(f"Insertion point <{insertion_point.tag}> is not part of the document")
    return insertion_point


def remove_element(element):
    """Detach `element` but keep its tail text in the parent."""
    parent = element.getparent()
    if parent is None:
        raise InsertionError("Cannot remove the document root")

    tail = element.tail
    if tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)


def apply(document, signature_element, insertion_point=None, removal_scope=RemovalScope.DOCUMENT):
    """
    Remove stale signatures and append `signature_element` to the insertion point.

    Args:
        document: lxml ElementTree or any element of the document
        signature_element: the assembled <Signature>
        insertion_point: parent of the new signature (document root by default)
        removal_scope: RemovalScope selecting which stale signatures go

    Returns:
        the document, mutated in place

    Raises:
        InsertionError: the insertion point is detached or would be removed
    """
    target = resolve_insertion_point(document, insertion_point)
    stale = find_stale_signatures(document, target, removal_scope)

    for signature in stale:
        if signature is target or any(node is signature for node in target.iterancestors()):
            raise InsertionError(f"Insertion point <{target.tag}> lies inside a signature being removed")

    for signature in stale:
        remove_element(signature)
    if stale:
        log.debug(f"Removed {len(stale)} stale signature element(s)")

    target.append(signature_element)
    return document
