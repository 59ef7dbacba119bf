"""
Roost Dispatch — Public API
=============================
Message fan-out and the host delivery collaborators.
"""

from roost.dispatch.delivery import (
    DeliveryProtocol,
    InMemoryPostOffice,
    Letter,
    acting_as,
    caller_endpoint,
)
from roost.dispatch.dispatcher import Dispatcher, PendingMessage

__all__ = [
    "Dispatcher",
    "PendingMessage",
    "DeliveryProtocol",
    "InMemoryPostOffice",
    "Letter",
    "acting_as",
    "caller_endpoint",
]
