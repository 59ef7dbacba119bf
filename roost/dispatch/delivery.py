"""
Roost Dispatch — Delivery Collaborators
==========================================
What the bus needs from its host:

- DeliveryProtocol: fire-and-forget post(endpoint, message_id, payload)
- caller endpoint:  "who is calling", used when subscribe() omits one

InMemoryPostOffice is a host implementation for local use and
tests: posted letters wait in per-endpoint inboxes until flush()
hands them to registered receivers.
"""

from __future__ import annotations

import contextlib
from collections import deque
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Protocol

from roost.errors import InvalidEndpoint
from roost.identifiers.canonicalizer import MessageId


# ══════════════════════════════════════════════════════════════
# DELIVERY PROTOCOL
# ══════════════════════════════════════════════════════════════

class DeliveryProtocol(Protocol):
    """
    One-way send to an addressable endpoint.

    The bus never inspects the outcome.
    """

    def post(self, endpoint: Any, message_id: MessageId, payload: Any) -> None:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# CALLER ENDPOINT
# ══════════════════════════════════════════════════════════════

_current_endpoint: ContextVar[Optional[Any]] = ContextVar(
    "roost_current_endpoint", default=None
)


def caller_endpoint(default: Any = None) -> Any:
    """
    Endpoint of the calling context, or default when none is active.

    Raises:
        InvalidEndpoint: no endpoint is active and no default is given
    """
    endpoint = _current_endpoint.get()
    if endpoint is None:
        endpoint = default
    if endpoint is None:
        raise InvalidEndpoint(
            "No endpoint given and no caller endpoint is active."
        )
    return endpoint


@contextlib.contextmanager
def acting_as(endpoint: Any) -> Iterator[Any]:
    """Make endpoint the caller endpoint for the enclosed block."""
    token = _current_endpoint.set(endpoint)
    try:
        yield endpoint
    finally:
        _current_endpoint.reset(token)


# ══════════════════════════════════════════════════════════════
# IN-MEMORY POST OFFICE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Letter:
    """One posted message, waiting in an inbox."""

    endpoint: Any
    message_id: MessageId
    payload: Any


Receiver = Callable[[MessageId, Any], Any]


class InMemoryPostOffice:
    """
    Local host for endpoints.

    post() only queues. flush() delivers queued letters in
    FIFO order, with the receiving endpoint acting as caller.
    Letters to endpoints without a receiver stay pending.
    """

    def __init__(self):
        self._inbox: Deque[Letter] = deque()
        self._receivers: Dict[Any, Receiver] = {}
        self._delivered = 0

    def register(self, endpoint: Any, receiver: Receiver) -> None:
        if endpoint is None:
            raise InvalidEndpoint()
        if not callable(receiver):
            raise TypeError("Receiver must be callable.")
        self._receivers[endpoint] = receiver

    def unregister(self, endpoint: Any) -> None:
        self._receivers.pop(endpoint, None)

    def post(self, endpoint: Any, message_id: MessageId, payload: Any) -> None:
        self._inbox.append(Letter(endpoint, message_id, payload))

    def flush(self) -> int:
        """Deliver pending letters to registered receivers. Returns the count."""
        delivered = 0
        kept: Deque[Letter] = deque()
        try:
            while self._inbox:
                letter = self._inbox.popleft()
                receiver = self._receivers.get(letter.endpoint)
                if receiver is None:
                    kept.append(letter)
                    continue
                delivered += 1
                with acting_as(letter.endpoint):
                    receiver(letter.message_id, letter.payload)
        finally:
            self._inbox.extendleft(reversed(kept))
            self._delivered += delivered
        return delivered

    def pending(self, endpoint: Any = None) -> List[Letter]:
        if endpoint is None:
            return list(self._inbox)
        return [letter for letter in self._inbox if letter.endpoint == endpoint]

    @property
    def delivered_count(self) -> int:
        return self._delivered

    def clear(self) -> None:
        self._inbox.clear()
