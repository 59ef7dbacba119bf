"""
Roost Dispatch — Dispatcher
==============================
Routes messages to hooks and delivery subscribers.

send() flow:
1. Look up the message's subscribers; nobody listening → NoListeners
2. Validate the payload; rejected → ValidationFailed
3. Call every hook synchronously, in the sender's context
4. Post to every delivery subscriber
5. Outermost send only: drain queued sends in FIFO order

Reentrancy:
A send() issued while a dispatch is in progress (from a hook or
from a synchronous delivery) is queued and reported as accepted.
It is dispatched after the triggering send has finished all of
its hooks and deliveries. Nested sends are never interleaved.

Hook or delivery failure must NOT:
- Break dispatch to the remaining subscribers
- Break draining of queued sends
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque

from roost.diagnostics.sinks import LogChannel
from roost.dispatch.delivery import DeliveryProtocol
from roost.errors import InvalidEndpoint, NoListeners, RoostError, ValidationFailed
from roost.identifiers.canonicalizer import MessageId
from roost.schemas.validator import PayloadValidator
from roost.subscriptions.registry import Subscriber, SubscriptionRegistry


@dataclass(frozen=True)
class PendingMessage:
    """A send() deferred until the active dispatch completes."""

    message_id: MessageId
    payload: Any


class Dispatcher:
    """
    Validates and fans out messages.

    Message ids are expected to be canonical already; the
    MessageBus facade canonicalizes before calling in.
    """

    def __init__(
        self,
        subscriptions: SubscriptionRegistry,
        validator: PayloadValidator,
        delivery: DeliveryProtocol,
        log: LogChannel,
        strict: bool = True,
    ):
        self._subscriptions = subscriptions
        self._validator = validator
        self._delivery = delivery
        self._log = log
        self._strict = strict
        self._queue: Deque[PendingMessage] = deque()
        self._depth = 0

    @property
    def is_dispatching(self) -> bool:
        return self._depth > 0

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    # ══════════════════════════════════════════════════════════
    # SEND TO (single explicit endpoint)
    # ══════════════════════════════════════════════════════════

    def send_to(self, endpoint: Any, message_id: MessageId, payload: Any = None) -> bool:
        """
        Validate and post to one endpoint, ignoring subscriptions.

        Raises:
            InvalidEndpoint:  endpoint is None or "" (strict mode)
            ValidationFailed: payload does not match the schema
        """
        if self._strict and (endpoint is None or endpoint == ""):
            raise InvalidEndpoint()

        payload = {} if payload is None else payload
        result = self._validator.check(message_id, payload)
        if not result.accepted:
            raise ValidationFailed(message_id, result.rejection)

        try:
            self._delivery.post(endpoint, message_id, payload)
        except Exception:
            self._log.exception(
                f"Delivery failed to endpoint {endpoint!r}, id: {message_id}"
            )
            return False
        return True

    # ══════════════════════════════════════════════════════════
    # SEND (fan-out to subscribers)
    # ══════════════════════════════════════════════════════════

    def send(self, message_id: MessageId, payload: Any = None) -> bool:
        """
        Dispatch now, or queue behind the dispatch in progress.

        Raises (outermost send only; queued sends are logged instead):
            NoListeners:      nobody is subscribed
            ValidationFailed: payload does not match the schema
        """
        if self._depth > 0:
            self._queue.append(PendingMessage(message_id, payload))
            self._log.trace(
                f"Dispatch in progress, queued message, id: {message_id}"
            )
            return True
        return self._dispatch(message_id, payload)

    def _dispatch(self, message_id: MessageId, payload: Any) -> bool:
        entry = self._subscriptions.lookup(message_id)
        if entry is None or entry.is_empty():
            raise NoListeners(message_id)

        payload = {} if payload is None else payload
        result = self._validator.check(message_id, payload)
        if not result.accepted:
            raise ValidationFailed(message_id, result.rejection)
        if not result.checked:
            self._log.trace(
                f"Sending anyway, because no data to check for message, "
                f"id: {message_id}"
            )

        self._depth += 1
        try:
            for subscriber in list(entry.hooks.values()):
                self._call_hook(subscriber, message_id, payload)

            for subscriber in list(entry.subs.values()):
                self._deliver(subscriber, message_id, payload)

            if self._depth == 1:
                self._drain()
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._queue.clear()
        return True

    def _drain(self) -> None:
        while self._queue:
            pending = self._queue.popleft()
            try:
                self._dispatch(pending.message_id, pending.payload)
            except NoListeners as exc:
                self._log.warn(f"Failed to send queued message. {exc}")
            except RoostError as exc:
                self._log.error(f"Failed to send queued message. {exc}")
            except Exception:
                self._log.exception(
                    f"Failed to send queued message, id: {pending.message_id}"
                )

    def _call_hook(self, subscriber: Subscriber, message_id: MessageId, payload: Any) -> None:
        try:
            subscriber.hook(message_id, payload)
        except Exception:
            self._log.exception(
                f"Hook failed for subscriber, id: {subscriber.id}, "
                f"message id: {message_id}"
            )

    def _deliver(self, subscriber: Subscriber, message_id: MessageId, payload: Any) -> None:
        try:
            self._delivery.post(subscriber.endpoint, message_id, payload)
        except Exception:
            self._log.exception(
                f"Delivery failed for subscriber, id: {subscriber.id}, "
                f"message id: {message_id}"
            )
