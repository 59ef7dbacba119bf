"""
Roost Schemas — Type Tags
============================
Closed set of payload field kinds.

A schema field constraint ("string|number|nil") is parsed once,
at define time, into a frozenset of TypeTags. Validation then
only compares the runtime kind of a value against that set.
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, FrozenSet

from roost.errors import InvalidSchema
from roost.identifiers.canonicalizer import MessageId


class TypeTag(Enum):
    """Runtime kinds a payload field may have."""
    NIL = "nil"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    HASH = "hash"           # canonical MessageId
    TABLE = "table"         # mapping
    VECTOR = "vector"       # non-empty list/tuple of numbers
    SEQUENCE = "sequence"   # any other list/tuple
    FUNCTION = "function"
    USERDATA = "userdata"   # anything else (endpoints, host objects)


TypeSet = FrozenSet[TypeTag]

TAG_SEPARATOR = "|"

TAG_ALIASES = {
    "bool": TypeTag.BOOLEAN,
    "vector3": TypeTag.VECTOR,
    "vector4": TypeTag.VECTOR,
}


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (numbers.Real, Decimal))


def runtime_kind(value: Any) -> TypeTag:
    """Classify a payload value into exactly one TypeTag."""
    if value is None:
        return TypeTag.NIL
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if _is_number(value):
        return TypeTag.NUMBER
    if isinstance(value, str):
        return TypeTag.STRING
    if isinstance(value, MessageId):
        return TypeTag.HASH
    if isinstance(value, Mapping):
        return TypeTag.TABLE
    if isinstance(value, (list, tuple)):
        if value and all(_is_number(item) for item in value):
            return TypeTag.VECTOR
        return TypeTag.SEQUENCE
    if callable(value):
        return TypeTag.FUNCTION
    return TypeTag.USERDATA


def parse_tag(raw: Any) -> TypeTag:
    if isinstance(raw, TypeTag):
        return raw
    if not isinstance(raw, str):
        raise InvalidSchema(f"Type tag must be a string, got {raw!r}.")

    name = raw.strip().lower()
    if name in TAG_ALIASES:
        return TAG_ALIASES[name]
    try:
        return TypeTag(name)
    except ValueError:
        raise InvalidSchema(
            f"Unknown type tag '{raw}'. "
            f"Must be one of: {', '.join(t.value for t in TypeTag)}."
        ) from None


def parse_type_set(constraint: Any) -> TypeSet:
    """
    Parse one field constraint into a non-empty TypeSet.

    Accepts "a|b|c", a single TypeTag, or an iterable of
    tags / tag names.
    """
    if isinstance(constraint, (str, TypeTag)):
        parts = (
            constraint.split(TAG_SEPARATOR)
            if isinstance(constraint, str)
            else [constraint]
        )
    else:
        try:
            parts = list(constraint)
        except TypeError:
            raise InvalidSchema(
                f"Field constraint must be a string, TypeTag or "
                f"iterable of tags, got {type(constraint).__name__}."
            ) from None

    tags = frozenset(parse_tag(part) for part in parts)
    if not tags:
        raise InvalidSchema("Field constraint must name at least one type.")
    return tags


def format_type_set(tags: TypeSet) -> str:
    return TAG_SEPARATOR.join(sorted(tag.value for tag in tags))
