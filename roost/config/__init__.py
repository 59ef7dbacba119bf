"""
Roost Config — Public API
===========================
Bus operating mode and startup options.
"""

from roost.config.settings import (
    DEFAULT_ENDPOINT,
    DEFAULT_LOG_TAG,
    BusConfig,
    BusMode,
)

__all__ = [
    "BusConfig",
    "BusMode",
    "DEFAULT_ENDPOINT",
    "DEFAULT_LOG_TAG",
]
