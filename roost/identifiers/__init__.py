"""
Roost Identifiers — Public API
================================
Canonical message identifiers.
"""

from roost.identifiers.canonicalizer import (
    IdentifierCanonicalizer,
    MessageId,
    MessageRef,
    digest_name,
)

__all__ = [
    "MessageId",
    "MessageRef",
    "IdentifierCanonicalizer",
    "digest_name",
]
