"""
Roost Schemas — Schema Registry
==================================
One optional field → TypeSet schema per canonical message id.

Rules:
- At most one definition per message id
- A schema is parsed once, at define time
- An absent or empty schema means "no validation"
- Redefinition requires a non-empty schema mapping,
  otherwise it is rejected and the old definition kept
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional

from roost.diagnostics.sinks import LogChannel
from roost.errors import InvalidSchema, RedefinitionRejected
from roost.identifiers.canonicalizer import IdentifierCanonicalizer, MessageId
from roost.schemas.types import TypeSet, format_type_set, parse_type_set


# ══════════════════════════════════════════════════════════════
# MESSAGE DEFINITION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class MessageDefinition:
    """
    Definition of one message.

    schema is None when the message is not validated.
    """

    id: MessageId
    schema: Optional[Mapping] = None

    @property
    def is_checked(self) -> bool:
        return bool(self.schema)

    def describe(self) -> Dict[str, str]:
        """Schema as plain "a|b" strings, for display."""
        if not self.schema:
            return {}
        return {
            name: format_type_set(tags)
            for name, tags in sorted(self.schema.items())
        }


def parse_schema(schema: Any) -> Optional[Mapping]:
    """
    Parse a raw schema into a read-only field → TypeSet mapping.

    Returns None for an absent or empty schema.
    """
    if schema is None:
        return None
    if not isinstance(schema, Mapping):
        raise InvalidSchema(
            f"Schema must be a mapping of field names to types, "
            f"got {type(schema).__name__}."
        )

    parsed: Dict[str, TypeSet] = {}
    for name, constraint in schema.items():
        if not isinstance(name, str) or not name:
            raise InvalidSchema(
                f"Schema field names must be non-empty strings, got {name!r}."
            )
        parsed[name] = parse_type_set(constraint)

    return MappingProxyType(parsed) if parsed else None


# ══════════════════════════════════════════════════════════════
# SCHEMA REGISTRY
# ══════════════════════════════════════════════════════════════

class SchemaRegistry:
    """
    In-memory registry of message definitions.

    Usage:
        schemas = SchemaRegistry(IdentifierCanonicalizer(), LogChannel())
        schemas.define("window_resized", {"width": "number"})
        schemas.lookup("window_resized").schema["width"]
    """

    def __init__(
        self,
        canonicalizer: IdentifierCanonicalizer,
        log: LogChannel,
    ):
        self._ids = canonicalizer
        self._log = log
        self._definitions: Dict[MessageId, MessageDefinition] = {}

    def define(self, identifier: Any, schema: Any = None) -> MessageDefinition:
        """
        Define or redefine a message.

        Raises:
            InvalidIdentifier:    identifier cannot be canonicalized
            RedefinitionRejected: message exists and schema is missing/empty
            InvalidSchema:        schema is malformed
        """
        message_id = self._ids.canonicalize(identifier)

        if message_id in self._definitions and (
            not isinstance(schema, Mapping) or not schema
        ):
            raise RedefinitionRejected(message_id)

        definition = MessageDefinition(id=message_id, schema=parse_schema(schema))
        self._definitions[message_id] = definition
        self._log.trace(f"Successfully defined message, id: {message_id}")
        return definition

    def undefine(self, identifier: Any) -> bool:
        """Remove a definition. Returns whether one existed."""
        message_id = self._ids.canonicalize(identifier)
        return self._definitions.pop(message_id, None) is not None

    def load(self, table: Mapping) -> int:
        """Define every entry of a name → schema table. Returns the count."""
        for name, schema in table.items():
            self.define(name, schema)
        return len(table)

    def lookup(self, identifier: Any) -> Optional[MessageDefinition]:
        return self._definitions.get(self._ids.canonicalize(identifier))

    def definitions(self) -> Mapping:
        """Read-only view of all definitions, keyed by MessageId."""
        return MappingProxyType(self._definitions)

    def count(self) -> int:
        return len(self._definitions)

    def __contains__(self, identifier: Any) -> bool:
        return self.lookup(identifier) is not None

    def __iter__(self) -> Iterator[MessageDefinition]:
        return iter(list(self._definitions.values()))
