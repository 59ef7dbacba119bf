"""
Roost Identifiers — Canonicalizer
====================================
Turns message names into canonical, comparable MessageIds.

Rules:
- A name is digested once and cached for reuse
- Equal names always produce equal MessageIds
- A MessageId passes through unchanged
- Anything else is rejected (InvalidIdentifier)
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from roost.errors import InvalidIdentifier


def digest_name(name: str) -> int:
    """64-bit digest of a message name."""
    raw = hashlib.blake2b(name.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(raw, "big")


# ══════════════════════════════════════════════════════════════
# MESSAGE ID
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MessageId:
    """
    Canonical message identifier.

    Compared and hashed by value only. The name is kept
    for diagnostics and does not take part in equality.
    """

    value: int
    name: str = field(default="", compare=False)

    @classmethod
    def of(cls, name: str) -> "MessageId":
        return cls(value=digest_name(name), name=name)

    def __str__(self) -> str:
        return self.name or f"hash:{self.value:016x}"


MessageRef = Union[str, MessageId]


# ══════════════════════════════════════════════════════════════
# CANONICALIZER
# ══════════════════════════════════════════════════════════════

class IdentifierCanonicalizer:
    """
    Memoizing name → MessageId mapping.

    Usage:
        ids = IdentifierCanonicalizer()
        ids.canonicalize("window_resized")
        ids("window_resized")       # same MessageId
        ids["window_resized"]       # same MessageId
    """

    def __init__(self):
        self._cache: Dict[str, MessageId] = {}

    def canonicalize(self, value: Any) -> MessageId:
        if isinstance(value, MessageId):
            return value
        if not isinstance(value, str):
            raise InvalidIdentifier(value)

        message_id = self._cache.get(value)
        if message_id is None:
            message_id = MessageId.of(value)
            self._cache[value] = message_id
        return message_id

    def is_canonical(self, value: Any) -> bool:
        return isinstance(value, MessageId)

    def cache_size(self) -> int:
        return len(self._cache)

    def __call__(self, value: Any) -> MessageId:
        return self.canonicalize(value)

    def __getitem__(self, value: Any) -> MessageId:
        return self.canonicalize(value)
