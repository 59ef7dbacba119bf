"""
Roost Config — Bus Settings
==============================
Operating mode and startup options for a MessageBus.

STRICT   → every argument is type-checked and diagnosed
TRUSTING → defensive type checks are skipped for speed

Schema validation, identifier canonicalization and
redefinition rules run in both modes.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Optional


DEFAULT_LOG_TAG = "roost"
DEFAULT_ENDPOINT = "main"


# ══════════════════════════════════════════════════════════════
# BUS MODE ENUM
# ══════════════════════════════════════════════════════════════

class BusMode(Enum):
    """How much the bus distrusts its callers."""
    STRICT = "STRICT"       # Validate everything, emit diagnostics
    TRUSTING = "TRUSTING"   # Skip defensive type checks


# ══════════════════════════════════════════════════════════════
# BUS CONFIG
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BusConfig:
    """
    Immutable bus configuration.

    load_system_letters: preload the built-in table of
    well-known message definitions at construction.
    default_endpoint: endpoint used by subscribe() when none is
    given and no caller endpoint is active. None disables it.
    """

    mode: BusMode = BusMode.STRICT
    logging_enabled: bool = True
    log_tag: str = DEFAULT_LOG_TAG
    load_system_letters: bool = True
    default_endpoint: Optional[str] = DEFAULT_ENDPOINT

    def __post_init__(self) -> None:
        if not isinstance(self.mode, BusMode):
            raise ValueError(f"mode must be a BusMode, got {self.mode!r}.")
        if not self.log_tag or not isinstance(self.log_tag, str):
            raise ValueError("log_tag must be a non-empty string.")
        if self.default_endpoint is not None and (
            not self.default_endpoint or not isinstance(self.default_endpoint, str)
        ):
            raise ValueError("default_endpoint must be a non-empty string or None.")

    @property
    def strict(self) -> bool:
        return self.mode == BusMode.STRICT

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BusConfig":
        """
        Build a config from plain data (e.g. a parsed settings file).

        mode may be given by name, case-insensitive.
        Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown bus config keys: {', '.join(unknown)}."
            )

        values = dict(data)
        mode = values.get("mode")
        if isinstance(mode, str):
            try:
                values["mode"] = BusMode[mode.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"Unknown bus mode '{mode}'. "
                    f"Must be one of: {', '.join(m.name for m in BusMode)}."
                ) from None
        return cls(**values)
