"""
Roost Subscriptions — Subscription Registry
==============================================
Tracks who listens to which messages.

Each subscriber is filed, per message, under either:
- hooks: called synchronously by the sender, before delivery
- subs:  receive the message through the delivery collaborator

Rules:
- Subscriber ids come from a strictly increasing counter
  starting at 0 and are never reused
- Subscribing twice yields two independent subscribers
- A subscription is all-or-nothing: one bad message id
  fails the whole call
- Unsubscribing an unknown id is an idempotent no-op
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from roost.diagnostics.sinks import LogChannel
from roost.errors import InvalidHook, InvalidId, InvalidMessages
from roost.identifiers.canonicalizer import IdentifierCanonicalizer, MessageId

Hook = Callable[[MessageId, Any], Any]
EndpointResolver = Callable[[], Any]


# ══════════════════════════════════════════════════════════════
# SUBSCRIBER & EVENT INDEX ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class Subscriber:
    """One subscribe() call. Owned by the registry."""

    id: int
    endpoint: Any
    messages: Tuple[MessageId, ...]
    hook: Optional[Hook] = None

    @property
    def is_hook(self) -> bool:
        return self.hook is not None


@dataclass
class EventIndexEntry:
    """Subscribers interested in one message, keyed by subscriber id."""

    hooks: Dict[int, Subscriber] = field(default_factory=dict)
    subs: Dict[int, Subscriber] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.hooks and not self.subs

    def discard(self, subscriber_id: int) -> None:
        self.hooks.pop(subscriber_id, None)
        self.subs.pop(subscriber_id, None)


def is_subscriber_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION REGISTRY
# ══════════════════════════════════════════════════════════════

class SubscriptionRegistry:
    """
    In-memory registry of subscribers and the message → subscriber index.

    Usage:
        registry = SubscriptionRegistry(ids, log, resolve_endpoint)
        sid = registry.subscribe(["window_resized", "exit"])
        registry.subscribe("exit", hook=on_exit)
        registry.unsubscribe(sid)
    """

    def __init__(
        self,
        canonicalizer: IdentifierCanonicalizer,
        log: LogChannel,
        resolve_endpoint: EndpointResolver,
        strict: bool = True,
    ):
        self._ids = canonicalizer
        self._log = log
        self._resolve_endpoint = resolve_endpoint
        self._strict = strict
        self._counter = itertools.count()
        self._subscribers: Dict[int, Subscriber] = {}
        self._events: Dict[MessageId, EventIndexEntry] = {}

    # ══════════════════════════════════════════════════════════
    # SUBSCRIBE
    # ══════════════════════════════════════════════════════════

    def subscribe(
        self,
        messages: Any,
        hook: Optional[Hook] = None,
        endpoint: Any = None,
    ) -> int:
        """
        Subscribe an endpoint (and optional hook) to one or many messages.

        Raises:
            InvalidMessages:   messages is not a non-empty list/tuple
            InvalidHook:       hook given but not callable
            InvalidIdentifier: one of the messages is malformed
            InvalidEndpoint:   no endpoint given and none is active

        Hook subscribers are called directly and need no endpoint;
        one is stored only when given explicitly.
        """
        if isinstance(messages, (str, MessageId)):
            messages = (messages,)

        if self._strict:
            if not isinstance(messages, (list, tuple)) or not messages:
                raise InvalidMessages(messages)
            if hook is not None and not callable(hook):
                raise InvalidHook(hook)

        try:
            message_ids = tuple(self._ids.canonicalize(m) for m in messages)
        except TypeError:
            raise InvalidMessages(messages) from None

        if endpoint is None and hook is None:
            endpoint = self._resolve_endpoint()

        subscriber = Subscriber(
            id=next(self._counter),
            endpoint=endpoint,
            messages=message_ids,
            hook=hook,
        )
        self._subscribers[subscriber.id] = subscriber

        for message_id in message_ids:
            entry = self._events.get(message_id)
            if entry is None:
                entry = EventIndexEntry()
                self._events[message_id] = entry

            if subscriber.is_hook:
                entry.hooks[subscriber.id] = subscriber
            else:
                entry.subs[subscriber.id] = subscriber

        self._log.trace(f"Successfully subscribed subscriber, id: {subscriber.id}")
        return subscriber.id

    # ══════════════════════════════════════════════════════════
    # UNSUBSCRIBE
    # ══════════════════════════════════════════════════════════

    def unsubscribe(self, subscriber_id: Any) -> bool:
        """
        Remove a subscriber from every message it listens to.

        Returns False when no id is given (nothing to do),
        True otherwise, including for unknown ids.

        Raises:
            InvalidId: id is present but not an integer
        """
        if subscriber_id is None:
            self._log.trace("Skipped unsubscribing, subscriber 'id' is not given.")
            return False

        if self._strict and not is_subscriber_id(subscriber_id):
            raise InvalidId(subscriber_id)

        subscriber = self._subscribers.pop(subscriber_id, None)
        if subscriber is None:
            self._log.warn(
                f"Skipped unsubscribing already unsubscribed or "
                f"not existing subscriber, id: {subscriber_id}"
            )
            return True

        for message_id in subscriber.messages:
            entry = self._events.get(message_id)
            if entry is not None:
                entry.discard(subscriber_id)

        self._log.trace(f"Successfully unsubscribed subscriber, id: {subscriber_id}")
        return True

    def unsubscribe_all(self) -> bool:
        """Unsubscribe every tracked subscriber. Stops at the first failure."""
        for subscriber_id in list(self._subscribers):
            if not self.unsubscribe(subscriber_id):
                return False
        return True

    # ══════════════════════════════════════════════════════════
    # LOOKUP
    # ══════════════════════════════════════════════════════════

    def lookup(self, message_id: MessageId) -> Optional[EventIndexEntry]:
        return self._events.get(message_id)

    def get(self, subscriber_id: int) -> Optional[Subscriber]:
        return self._subscribers.get(subscriber_id)

    def count(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber_id: Any) -> bool:
        return subscriber_id in self._subscribers

    def __iter__(self) -> Iterator[Subscriber]:
        return iter(list(self._subscribers.values()))
