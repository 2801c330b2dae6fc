from dataclasses import dataclass, field
from typing import Optional, Tuple

from dsig import algorithms
from dsig.internal.assembler import RemovalScope
from dsig.internal.reference import ReferenceDescriptor, Transform


@dataclass(frozen=True)
class SigningConfig:
    """Algorithm identifiers and placement rules for one enveloped signature."""
    canonicalization_method: str = algorithms.EXC_C14N
    signature_method: str = algorithms.RSA_SHA256
    digest_method: str = algorithms.SHA256
    reference_uri: str = ""
    inclusive_prefixes: Tuple[str, ...] = ()
    removal_scope: RemovalScope = RemovalScope.DOCUMENT
    reference: Optional[ReferenceDescriptor] = field(default=None)

    @classmethod
    def from_names(cls, digest="sha256", signature="rsa-sha256", scope="document",
                   reference_uri="", inclusive_prefixes=()):
        """Build a config from short algorithm names or full URIs."""
        return cls(
            signature_method=algorithms.resolve_algorithm(signature),
            digest_method=algorithms.resolve_algorithm(digest),
            reference_uri=reference_uri,
            inclusive_prefixes=tuple(inclusive_prefixes),
            removal_scope=RemovalScope(scope),
        )

    def reference_descriptor(self) -> ReferenceDescriptor:
        """The explicit reference, or enveloped + c14n over `reference_uri`."""
        if self.reference is not None:
            return self.reference
        return ReferenceDescriptor(
            uri=self.reference_uri,
            transforms=(
                Transform(algorithms.ENVELOPED_SIGNATURE),
                Transform(self.canonicalization_method, self.inclusive_prefixes),
            ),
            digest_method=self.digest_method,
        )


DEFAULT_CONFIG = SigningConfig()
