"""
Roost — Message Bus
=====================
The public API of the bus.

    bus = MessageBus()
    bus.define("window_resized", {"width": "number", "height": "number"})
    sid = bus.subscribe("window_resized", endpoint="hud")
    bus.send("window_resized", {"width": 640, "height": 480})
    bus.unsubscribe(sid)

Every operation reports failure through its return value and
the log channel. Nothing raises for caller mistakes:
- define / unsubscribe / unsubscribe_all / send / send_to → bool
- subscribe → subscriber id, or None (0 is a valid id)

One bus owns all of its state. Independent buses share nothing.
"""

from __future__ import annotations

from functools import partial
from threading import RLock
from typing import Any, Mapping, Optional

from roost.config.settings import BusConfig
from roost.diagnostics.sinks import LogChannel, LogSink
from roost.dispatch.delivery import DeliveryProtocol, InMemoryPostOffice, caller_endpoint
from roost.dispatch.dispatcher import Dispatcher
from roost.errors import NoListeners, RoostError
from roost.identifiers.canonicalizer import IdentifierCanonicalizer
from roost.schemas.letters import SYSTEM_LETTERS
from roost.schemas.registry import MessageDefinition, SchemaRegistry
from roost.schemas.validator import PayloadValidator
from roost.subscriptions.registry import (
    EndpointResolver,
    Hook,
    Subscriber,
    SubscriptionRegistry,
)


class MessageBus:
    """
    In-process, synchronous publish/subscribe bus.

    Args:
        delivery:         host collaborator that posts to endpoints
                          (default: a fresh InMemoryPostOffice)
        config:           BusConfig (default: strict, console logging)
        resolve_endpoint: returns the caller's endpoint when subscribe()
                          omits one (default: the active caller endpoint,
                          else config.default_endpoint)
        log_sink:         initial LogSink (default: ConsoleLogSink)

    Every public call holds a re-entrant lock for its whole duration,
    hooks included, so hooks may call back into the bus.
    """

    def __init__(
        self,
        delivery: Optional[DeliveryProtocol] = None,
        config: Optional[BusConfig] = None,
        resolve_endpoint: Optional[EndpointResolver] = None,
        log_sink: Optional[LogSink] = None,
    ):
        self._config = config or BusConfig()
        self._lock = RLock()

        self._log = LogChannel(sink=log_sink, tag=self._config.log_tag)
        if not self._config.logging_enabled:
            self._log.enable(False)

        self._ids = IdentifierCanonicalizer()
        self._schemas = SchemaRegistry(self._ids, self._log)
        if self._config.load_system_letters:
            self._schemas.load(SYSTEM_LETTERS)

        self._delivery = delivery if delivery is not None else InMemoryPostOffice()
        self._subscriptions = SubscriptionRegistry(
            self._ids,
            self._log,
            resolve_endpoint or partial(caller_endpoint, self._config.default_endpoint),
            strict=self._config.strict,
        )
        self._validator = PayloadValidator(self._schemas, strict=self._config.strict)
        self._dispatcher = Dispatcher(
            self._subscriptions,
            self._validator,
            self._delivery,
            self._log,
            strict=self._config.strict,
        )

    # ══════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════

    @property
    def config(self) -> BusConfig:
        return self._config

    @property
    def ids(self) -> IdentifierCanonicalizer:
        return self._ids

    @property
    def delivery(self) -> DeliveryProtocol:
        return self._delivery

    @property
    def log(self) -> LogChannel:
        return self._log

    @property
    def letters(self) -> Mapping:
        """Read-only view of all message definitions."""
        return self._schemas.definitions()

    @property
    def is_dispatching(self) -> bool:
        return self._dispatcher.is_dispatching

    @property
    def pending_count(self) -> int:
        return self._dispatcher.pending_count

    # ══════════════════════════════════════════════════════════
    # DEFINITIONS
    # ══════════════════════════════════════════════════════════

    def define(self, identifier: Any, schema: Any = None) -> bool:
        """
        Define a message with an optional field → type schema.

        Field types are tag names, "|"-separated for unions:
            bus.define("score", {"points": "number", "label": "string|nil"})

        Redefining needs a non-empty schema; otherwise the old
        definition is kept and False returned.
        """
        with self._lock:
            try:
                self._schemas.define(identifier, schema)
            except RoostError as exc:
                return self._report(f"Failed to define message, id: {identifier}.", exc)
            return True

    def undefine(self, identifier: Any) -> bool:
        with self._lock:
            try:
                return self._schemas.undefine(identifier)
            except RoostError as exc:
                return self._report("Failed to undefine message.", exc)

    def definition(self, identifier: Any) -> Optional[MessageDefinition]:
        with self._lock:
            try:
                return self._schemas.lookup(identifier)
            except RoostError as exc:
                self._report("Failed to look up message definition.", exc)
                return None

    def validate(self, identifier: Any, payload: Any = None) -> bool:
        """Check a payload against its schema without sending it."""
        with self._lock:
            try:
                message_id = self._ids.canonicalize(identifier)
            except RoostError as exc:
                return self._report("Failed to validate message.", exc)
            payload = {} if payload is None else payload
            try:
                return self._validator.validate(message_id, payload)
            except Exception:
                self._log.exception(f"Failed to validate message, id: {message_id}.")
                return False

    # ══════════════════════════════════════════════════════════
    # SUBSCRIPTIONS
    # ══════════════════════════════════════════════════════════

    def subscribe(
        self,
        messages: Any,
        hook: Optional[Hook] = None,
        endpoint: Any = None,
    ) -> Optional[int]:
        """
        Subscribe to one message id or a list of them.

        With a hook, the hook is called synchronously on every send,
        before delivery subscribers receive the message. Without an
        endpoint, the caller's active endpoint is used, falling back
        to the configured default endpoint. Hook subscribers need none.

        Returns the new subscriber id, or None on failure.
        """
        with self._lock:
            try:
                return self._subscriptions.subscribe(messages, hook, endpoint)
            except RoostError as exc:
                self._report("Failed to subscribe.", exc)
                return None

    def unsubscribe(self, subscriber_id: Any) -> bool:
        with self._lock:
            try:
                return self._subscriptions.unsubscribe(subscriber_id)
            except RoostError as exc:
                return self._report("Failed to unsubscribe.", exc)

    def unsubscribe_all(self) -> bool:
        with self._lock:
            try:
                return self._subscriptions.unsubscribe_all()
            except RoostError as exc:
                return self._report("Failed to unsubscribe all.", exc)

    def subscriber(self, subscriber_id: int) -> Optional[Subscriber]:
        with self._lock:
            return self._subscriptions.get(subscriber_id)

    def subscriber_count(self) -> int:
        with self._lock:
            return self._subscriptions.count()

    # ══════════════════════════════════════════════════════════
    # SENDING
    # ══════════════════════════════════════════════════════════

    def send(self, identifier: Any, payload: Any = None) -> bool:
        """
        Send a message to every subscriber.

        Hooks run immediately; delivery subscribers are posted to
        afterwards. Called during another send, the message is
        queued behind it and True is returned.

        False when nobody listens or the payload is rejected.
        """
        with self._lock:
            nested = self._dispatcher.is_dispatching
            try:
                message_id = self._ids.canonicalize(identifier)
                sent = self._dispatcher.send(message_id, payload)
            except RoostError as exc:
                return self._report("Failed to send message.", exc)
            except Exception:
                self._log.exception(f"Failed to send message, id: {identifier}.")
                return False
            if sent and not nested:
                self._log.info(f"Message sent successfully, id: {message_id}")
            return sent

    def send_to(self, endpoint: Any, identifier: Any, payload: Any = None) -> bool:
        """Validate and post a message to one endpoint, bypassing subscriptions."""
        with self._lock:
            try:
                message_id = self._ids.canonicalize(identifier)
                return self._dispatcher.send_to(endpoint, message_id, payload)
            except RoostError as exc:
                return self._report(
                    f"Failed to send message to endpoint: {endpoint!r}.", exc
                )
            except Exception:
                self._log.exception(
                    f"Failed to send message to endpoint: {endpoint!r}, id: {identifier}."
                )
                return False

    # ══════════════════════════════════════════════════════════
    # LOGGING
    # ══════════════════════════════════════════════════════════

    def set_logging_enabled(self, enabled: bool) -> None:
        """Switch between console logging and silence."""
        with self._lock:
            self._log.enable(enabled)

    def install_logger(self, sink: Optional[LogSink], tag: Optional[str] = None) -> None:
        """Install a log sink (None restores the console) and optionally a tag."""
        with self._lock:
            self._log.install(sink, tag)

    # ══════════════════════════════════════════════════════════
    # INTERNAL
    # ══════════════════════════════════════════════════════════

    def _report(self, context: str, exc: RoostError) -> bool:
        if isinstance(exc, NoListeners):
            self._log.warn(f"{context} {exc}")
        else:
            self._log.error(f"{context} {exc}")
        return False
