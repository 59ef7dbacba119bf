"""
Roost Schemas — Public API
============================
Message definitions, type tags and payload validation.
"""

from roost.schemas.letters import SYSTEM_LETTERS
from roost.schemas.registry import MessageDefinition, SchemaRegistry, parse_schema
from roost.schemas.results import Rejection, RejectionCode, ValidationResult
from roost.schemas.types import (
    TypeSet,
    TypeTag,
    format_type_set,
    parse_type_set,
    runtime_kind,
)
from roost.schemas.validator import PayloadValidator

__all__ = [
    "SYSTEM_LETTERS",
    "MessageDefinition",
    "SchemaRegistry",
    "parse_schema",
    "PayloadValidator",
    "Rejection",
    "RejectionCode",
    "ValidationResult",
    "TypeTag",
    "TypeSet",
    "parse_type_set",
    "format_type_set",
    "runtime_kind",
]
