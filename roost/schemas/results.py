"""
Roost Schemas — Validation Results
=====================================
Every payload rejection is explicit and names the failing field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class RejectionCode:
    """All possible payload rejection codes."""

    PAYLOAD_NOT_MAPPING = "PAYLOAD_NOT_MAPPING"
    MISSING_FIELD = "MISSING_FIELD"
    FIELD_TYPE_MISMATCH = "FIELD_TYPE_MISMATCH"


@dataclass(frozen=True)
class Rejection:
    """One reason for rejecting a payload."""

    code: str
    message: str
    field: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of payload validation.

    accepted=True  → payload may be sent
    accepted=False → rejected, see rejection
    checked=False  → no schema registered, nothing was checked
    """

    accepted: bool
    rejection: Optional[Rejection] = None
    checked: bool = True

    def __bool__(self) -> bool:
        return self.accepted


ACCEPTED_UNCHECKED = ValidationResult(accepted=True, checked=False)
ACCEPTED = ValidationResult(accepted=True)
