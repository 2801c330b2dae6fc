"""
SignedInfo assembly and canonicalization.

SignedInfo is the block the signature value actually covers. It is rendered
in the XML-DSig namespace (default namespace, no prefix) and canonicalized
with the algorithm it declares in its own CanonicalizationMethod.
"""
from dataclasses import dataclass
from typing import Tuple

from lxml import etree

from dsig import algorithms
from dsig.algorithms import DSIG_NS, EXC_C14N_NS
from dsig.internal.c14n import canonicalize
from dsig.internal.reference import Reference
from exceptions.exceptions import CanonicalizationError, SigningError


def ds(tag):
    return f"{{{DSIG_NS}}}{tag}"


@dataclass(frozen=True)
class SignedInfo:
    canonicalization_method: str
    signature_method: str
    references: Tuple[Reference, ...]
    inclusive_prefixes: Tuple[str, ...] = ()

    def to_element(self, parent=None):
        """Render as a <SignedInfo> element, appended to `parent` when given."""
        if parent is None:
            signed_info = etree.Element(ds("SignedInfo"), nsmap={None: DSIG_NS})
        else:
            signed_info = etree.SubElement(parent, ds("SignedInfo"))

        c14n_method = etree.SubElement(signed_info, ds("CanonicalizationMethod"),
                                       Algorithm=self.canonicalization_method)
        _add_inclusive_namespaces(c14n_method, self.inclusive_prefixes)
        etree.SubElement(signed_info, ds("SignatureMethod"), Algorithm=self.signature_method)

        for reference in self.references:
            ref = etree.SubElement(signed_info, ds("Reference"), URI=reference.uri)
            transforms = etree.SubElement(ref, ds("Transforms"))
            for transform in reference.transforms:
                node = etree.SubElement(transforms, ds("Transform"), Algorithm=transform.algorithm)
                _add_inclusive_namespaces(node, transform.inclusive_prefixes)
            etree.SubElement(ref, ds("DigestMethod"), Algorithm=reference.digest_method)
            etree.SubElement(ref, ds("DigestValue")).text = reference.digest_value_b64

        return signed_info


def _add_inclusive_namespaces(parent, prefixes):
    if prefixes:
        etree.SubElement(parent, f"{{{EXC_C14N_NS}}}InclusiveNamespaces",
                         nsmap={"ec": EXC_C14N_NS}, PrefixList=" ".join(prefixes))


def build(canonicalization_method, signature_method, references, inclusive_prefixes=()) -> SignedInfo:
    """
    Assemble SignedInfo after checking algorithm consistency.

    Raises:
        CanonicalizationError: unsupported canonicalization method, or a
            reference canonicalized with another algorithm
        SigningError: unsupported signature method
    """
    if canonicalization_method not in algorithms.CANONICALIZATION_METHODS:
        raise CanonicalizationError(f"Unsupported canonicalization method: {canonicalization_method}")
    if signature_method not in algorithms.SIGNATURE_METHODS:
        raise SigningError(f"Unsupported signature method: {signature_method}")
    if not references:
        raise CanonicalizationError("SignedInfo needs at least one reference")

    for reference in references:
        for transform in reference.transforms:
            if transform.algorithm != algorithms.ENVELOPED_SIGNATURE \
                    and transform.algorithm != canonicalization_method:
                raise CanonicalizationError(
                    f"Reference '{reference.uri}' is canonicalized with {transform.algorithm}, "
                    f"SignedInfo declares {canonicalization_method}")

    return SignedInfo(
        canonicalization_method=canonicalization_method,
        signature_method=signature_method,
        references=tuple(references),
        inclusive_prefixes=tuple(inclusive_prefixes),
    )


def canonicalize_signed_info(signed_info_element, context=None) -> bytes:
    """
    Canonicalize a <SignedInfo> element with the method it declares.

    A detached SignedInfo is canonicalized as it will read once inserted under
    `context` (normally the insertion point). Prefixes from the
    InclusiveNamespaces list are then resolved against the namespaces in
    scope there, as a verifier sees them.
    """
    if context is not None and signed_info_element.getparent() is None:
        scope = etree.Element(context.tag, nsmap=context.nsmap)
        scope.append(signed_info_element)
        try:
            return canonicalize_signed_info(signed_info_element)
        finally:
            scope.remove(signed_info_element)

    method = signed_info_element.find(ds("CanonicalizationMethod"))
    if method is None:
        raise CanonicalizationError("SignedInfo has no CanonicalizationMethod")

    algorithm = method.get("Algorithm")
    if algorithm not in algorithms.CANONICALIZATION_METHODS:
        raise CanonicalizationError(f"Unsupported canonicalization method: {algorithm}")

    prefixes = ()
    inclusive = method.find(f"{{{EXC_C14N_NS}}}InclusiveNamespaces")
    if inclusive is not None:
        prefixes = tuple(inclusive.get("PrefixList", "").split())

    return canonicalize(signed_info_element, inclusive_prefixes=prefixes)
