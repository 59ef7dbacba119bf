"""
Roost Schemas — Payload Validator
====================================
Checks a payload against the schema registered for its message.

- No definition or no schema → accepted (explicit opt-out)
- Fields are checked in lexicographic order
- First failing field stops the check
- An absent field only matches the "nil" tag

Pure: payload in → ValidationResult out. No side effects.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from roost.identifiers.canonicalizer import MessageId
from roost.schemas.registry import SchemaRegistry
from roost.schemas.results import (
    ACCEPTED,
    ACCEPTED_UNCHECKED,
    Rejection,
    RejectionCode,
    ValidationResult,
)
from roost.schemas.types import TypeTag, format_type_set, runtime_kind


class PayloadValidator:
    """Validates payloads against a SchemaRegistry."""

    def __init__(self, schemas: SchemaRegistry, strict: bool = True):
        self._schemas = schemas
        self._strict = strict

    def check(self, message_id: MessageId, payload: Any) -> ValidationResult:
        definition = self._schemas.lookup(message_id)
        if definition is None or not definition.schema:
            return ACCEPTED_UNCHECKED

        if self._strict and not isinstance(payload, Mapping):
            return ValidationResult(
                accepted=False,
                rejection=Rejection(
                    code=RejectionCode.PAYLOAD_NOT_MAPPING,
                    message=(
                        f"Payload must be a mapping, "
                        f"got {type(payload).__name__}."
                    ),
                ),
            )

        for name in sorted(definition.schema):
            allowed = definition.schema[name]
            value = payload.get(name)
            kind = runtime_kind(value)
            if kind in allowed:
                continue

            if kind is TypeTag.NIL:
                return ValidationResult(
                    accepted=False,
                    rejection=Rejection(
                        code=RejectionCode.MISSING_FIELD,
                        message=f"It expects not nil key: {name}",
                        field=name,
                    ),
                )
            return ValidationResult(
                accepted=False,
                rejection=Rejection(
                    code=RejectionCode.FIELD_TYPE_MISMATCH,
                    message=(
                        f"It expects key: [{name}] to be of type: "
                        f"{format_type_set(allowed)}, got: {kind.value}"
                    ),
                    field=name,
                ),
            )

        return ACCEPTED

    def validate(self, message_id: MessageId, payload: Any) -> bool:
        return self.check(message_id, payload).accepted
