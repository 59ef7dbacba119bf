"""
Roost — Public API
====================
In-process, typed publish/subscribe message bus.
Define a message, subscribe to it, send it.
"""

from roost.bus import MessageBus
from roost.config import BusConfig, BusMode
from roost.diagnostics import ConsoleLogSink, LogSink, NullLogSink
from roost.dispatch import (
    DeliveryProtocol,
    InMemoryPostOffice,
    Letter,
    acting_as,
    caller_endpoint,
)
from roost.errors import (
    ErrorCode,
    InvalidEndpoint,
    InvalidHook,
    InvalidId,
    InvalidIdentifier,
    InvalidMessages,
    InvalidSchema,
    NoListeners,
    RedefinitionRejected,
    RoostError,
    ValidationFailed,
)
from roost.identifiers import MessageId
from roost.schemas import SYSTEM_LETTERS, MessageDefinition, TypeTag

__all__ = [
    "MessageBus",
    "BusConfig",
    "BusMode",
    "LogSink",
    "ConsoleLogSink",
    "NullLogSink",
    "DeliveryProtocol",
    "InMemoryPostOffice",
    "Letter",
    "acting_as",
    "caller_endpoint",
    "MessageId",
    "MessageDefinition",
    "TypeTag",
    "SYSTEM_LETTERS",
    "ErrorCode",
    "RoostError",
    "InvalidIdentifier",
    "InvalidMessages",
    "InvalidHook",
    "InvalidId",
    "InvalidEndpoint",
    "InvalidSchema",
    "RedefinitionRejected",
    "ValidationFailed",
    "NoListeners",
]
