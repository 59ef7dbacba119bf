"""
Tests for roost.dispatch.dispatcher — fan-out and reentrancy ordering.

Covers:
- Hooks run before delivery subscribers
- Nobody listening → False, nothing delivered
- Rejected payload → False, nothing called
- Nested sends are queued and delivered in FIFO order after the
  triggering send completes
- Hook / delivery failures do not break dispatch
- send_to ignores subscriptions
"""

import pytest

from roost.diagnostics import LogChannel, NullLogSink
from roost.dispatch import Dispatcher
from roost.errors import InvalidEndpoint, NoListeners, ValidationFailed
from roost.identifiers import IdentifierCanonicalizer
from roost.schemas import PayloadValidator, SchemaRegistry
from roost.subscriptions import SubscriptionRegistry


class RecordingDelivery:
    """Writes every post into a shared journal."""

    def __init__(self, journal):
        self.journal = journal
        self.on_post = None

    def post(self, endpoint, message_id, payload):
        self.journal.append(f"post {endpoint} {message_id}")
        if self.on_post is not None:
            self.on_post(endpoint, message_id, payload)


class RecordingSink:
    def __init__(self):
        self.records = []

    def trace(self, message, tag):
        self.records.append(("trace", message))

    def info(self, message, tag):
        self.records.append(("info", message))

    def warn(self, message, tag):
        self.records.append(("warn", message))

    def error(self, message, tag):
        self.records.append(("error", message))


# ══════════════════════════════════════════════════════════════
# FIXTURES
# ══════════════════════════════════════════════════════════════

@pytest.fixture
def journal():
    return []


@pytest.fixture
def ids():
    return IdentifierCanonicalizer()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def log(sink):
    return LogChannel(sink)


@pytest.fixture
def schemas(ids, log):
    return SchemaRegistry(ids, log)


@pytest.fixture
def subscriptions(ids, log):
    return SubscriptionRegistry(ids, log, lambda: "caller")


@pytest.fixture
def delivery(journal):
    return RecordingDelivery(journal)


@pytest.fixture
def dispatcher(subscriptions, schemas, delivery, log):
    return Dispatcher(subscriptions, PayloadValidator(schemas), delivery, log)


def recording_hook(journal, label, then=None):
    def hook(message_id, payload):
        journal.append(label)
        if then is not None:
            then()
    return hook


# ══════════════════════════════════════════════════════════════
# BASIC SEND
# ══════════════════════════════════════════════════════════════

class TestSend:
    def test_hooks_before_deliveries(self, dispatcher, subscriptions, ids, journal):
        subscriptions.subscribe("B", endpoint="listener")
        subscriptions.subscribe("B", hook=recording_hook(journal, "hook B"))
        assert dispatcher.send(ids("B")) is True
        assert journal == ["hook B", "post listener B"]

    def test_every_subscriber_receives(self, dispatcher, subscriptions, ids, journal):
        subscriptions.subscribe("B", endpoint="one")
        subscriptions.subscribe("B", endpoint="two")
        dispatcher.send(ids("B"))
        assert sorted(journal) == ["post one B", "post two B"]

    def test_hook_receives_id_and_payload(self, dispatcher, subscriptions, ids):
        seen = []
        subscriptions.subscribe("B", hook=lambda mid, payload: seen.append((mid, payload)))
        dispatcher.send(ids("B"), {"v": 1})
        assert seen == [(ids("B"), {"v": 1})]

    def test_payload_defaults_to_empty_mapping(self, dispatcher, subscriptions, ids):
        seen = []
        subscriptions.subscribe("B", hook=lambda mid, payload: seen.append(payload))
        dispatcher.send(ids("B"))
        assert seen == [{}]

    def test_no_listeners(self, dispatcher, ids, journal):
        with pytest.raises(NoListeners):
            dispatcher.send(ids("nobody"))
        assert journal == []

    def test_no_listeners_after_unsubscribe(self, dispatcher, subscriptions, ids, journal):
        sid = subscriptions.subscribe("B")
        subscriptions.unsubscribe(sid)
        with pytest.raises(NoListeners):
            dispatcher.send(ids("B"))
        assert journal == []
        assert not dispatcher.is_dispatching

    def test_rejected_payload(self, dispatcher, subscriptions, schemas, ids, journal):
        schemas.define("B", {"v": "number"})
        subscriptions.subscribe("B", endpoint="listener")
        subscriptions.subscribe("B", hook=recording_hook(journal, "hook B"))
        with pytest.raises(ValidationFailed):
            dispatcher.send(ids("B"), {"v": "bad"})
        assert journal == []

    def test_state_idle_after_send(self, dispatcher, subscriptions, ids):
        subscriptions.subscribe("B")
        dispatcher.send(ids("B"))
        assert not dispatcher.is_dispatching
        assert dispatcher.pending_count == 0


# ══════════════════════════════════════════════════════════════
# REENTRANCY
# ══════════════════════════════════════════════════════════════

class TestReentrancy:
    def test_nested_send_waits_for_outer_dispatch(
        self, dispatcher, subscriptions, ids, journal
    ):
        subscriptions.subscribe(
            "B",
            hook=recording_hook(journal, "hook B", then=lambda: dispatcher.send(ids("A"))),
        )
        subscriptions.subscribe("B", endpoint="b")
        subscriptions.subscribe("A", hook=recording_hook(journal, "hook A"))
        subscriptions.subscribe("A", endpoint="a")

        assert dispatcher.send(ids("B")) is True
        assert journal == ["hook B", "post b B", "hook A", "post a A"]

    def test_nested_sends_keep_issue_order(self, dispatcher, subscriptions, ids, journal):
        def send_three():
            dispatcher.send(ids("A"))
            dispatcher.send(ids("C"))
            dispatcher.send(ids("A"))

        subscriptions.subscribe("B", hook=recording_hook(journal, "hook B", then=send_three))
        subscriptions.subscribe("A", hook=recording_hook(journal, "hook A"))
        subscriptions.subscribe("C", hook=recording_hook(journal, "hook C"))

        dispatcher.send(ids("B"))
        assert journal == ["hook B", "hook A", "hook C", "hook A"]

    def test_nested_send_reports_accepted(self, dispatcher, subscriptions, ids, sink):
        results = []
        subscriptions.subscribe(
            "B", hook=lambda mid, p: results.append(dispatcher.send(ids("nobody")))
        )
        dispatcher.send(ids("B"))
        assert results == [True]
        assert ("warn", "Failed to send queued message. Message nobody is not "
                "subscribed to by anything.") in sink.records

    def test_dispatching_flag_inside_hook(self, dispatcher, subscriptions, ids):
        seen = []
        subscriptions.subscribe(
            "B", hook=lambda mid, p: seen.append((dispatcher.is_dispatching, dispatcher.pending_count))
        )
        dispatcher.send(ids("B"))
        assert seen == [(True, 0)]

    def test_sends_from_drained_messages_are_queued_too(
        self, dispatcher, subscriptions, ids, journal
    ):
        subscriptions.subscribe(
            "B",
            hook=recording_hook(journal, "hook B", then=lambda: (
                dispatcher.send(ids("A")), dispatcher.send(ids("C"))
            )),
        )
        subscriptions.subscribe(
            "A",
            hook=recording_hook(journal, "hook A", then=lambda: dispatcher.send(ids("D"))),
        )
        subscriptions.subscribe("A", endpoint="a")
        subscriptions.subscribe("C", hook=recording_hook(journal, "hook C"))
        subscriptions.subscribe("D", hook=recording_hook(journal, "hook D"))

        dispatcher.send(ids("B"))
        assert journal == ["hook B", "hook A", "post a A", "hook C", "hook D"]
        assert dispatcher.pending_count == 0

    def test_send_from_delivery_is_queued(
        self, dispatcher, subscriptions, delivery, ids, journal
    ):
        def relay(endpoint, message_id, payload):
            if endpoint == "relay":
                dispatcher.send(ids("A"))

        delivery.on_post = relay
        subscriptions.subscribe("B", endpoint="relay")
        subscriptions.subscribe("A", endpoint="a")

        dispatcher.send(ids("B"))
        assert journal == ["post relay B", "post a A"]

    def test_queued_message_validated_at_drain(
        self, dispatcher, subscriptions, schemas, ids, journal
    ):
        schemas.define("A", {"v": "number"})
        subscriptions.subscribe(
            "B",
            hook=lambda mid, p: (
                dispatcher.send(ids("A"), {"v": "bad"}),
                dispatcher.send(ids("A"), {"v": 2}),
            ),
        )
        subscriptions.subscribe("A", endpoint="a")

        assert dispatcher.send(ids("B")) is True
        assert journal == ["post a A"]

    def test_queued_message_without_listeners_skipped(
        self, dispatcher, subscriptions, ids, journal
    ):
        subscriptions.subscribe(
            "B",
            hook=lambda mid, p: (
                dispatcher.send(ids("nobody")),
                dispatcher.send(ids("A")),
            ),
        )
        subscriptions.subscribe("A", endpoint="a")

        dispatcher.send(ids("B"))
        assert journal == ["post a A"]

    def test_hook_subscription_changes_seen_by_queued_sends(
        self, dispatcher, subscriptions, ids, journal
    ):
        def subscribe_late():
            subscriptions.subscribe("A", endpoint="late")
            dispatcher.send(ids("A"))

        subscriptions.subscribe("B", hook=recording_hook(journal, "hook B", then=subscribe_late))

        dispatcher.send(ids("B"))
        assert journal == ["hook B", "post late A"]


# ══════════════════════════════════════════════════════════════
# FAILURE ISOLATION
# ══════════════════════════════════════════════════════════════

class TestFailureIsolation:
    def test_failing_hook_does_not_stop_dispatch(
        self, dispatcher, subscriptions, ids, journal, sink
    ):
        def broken(mid, payload):
            raise RuntimeError("hook exploded")

        subscriptions.subscribe("B", hook=broken)
        subscriptions.subscribe("B", hook=recording_hook(journal, "hook B"))
        subscriptions.subscribe("B", endpoint="b")

        assert dispatcher.send(ids("B")) is True
        assert journal == ["hook B", "post b B"]
        assert any(level == "error" and "Hook failed" in message
                   for level, message in sink.records)

    def test_failing_delivery_does_not_stop_dispatch(
        self, dispatcher, subscriptions, delivery, ids, journal
    ):
        def explode(endpoint, message_id, payload):
            if endpoint == "broken":
                raise ConnectionError("endpoint gone")

        delivery.on_post = explode
        subscriptions.subscribe("B", endpoint="broken")
        subscriptions.subscribe("B", endpoint="fine")

        assert dispatcher.send(ids("B")) is True
        assert sorted(journal) == ["post broken B", "post fine B"]

    def test_failing_hook_does_not_stop_drain(self, dispatcher, subscriptions, ids, journal):
        def send_then_fail(mid, payload):
            dispatcher.send(ids("A"))
            raise RuntimeError("after queueing")

        subscriptions.subscribe("B", hook=send_then_fail)
        subscriptions.subscribe("A", endpoint="a")

        dispatcher.send(ids("B"))
        assert journal == ["post a A"]
        assert not dispatcher.is_dispatching

    def test_unexpected_error_in_queued_send_does_not_stop_drain(
        self, subscriptions, schemas, delivery, log, ids, journal, sink
    ):
        trusting = Dispatcher(
            subscriptions, PayloadValidator(schemas, strict=False), delivery, log,
            strict=False,
        )
        schemas.define("typed", {"v": "number"})
        subscriptions.subscribe(
            "B",
            hook=lambda mid, p: (
                trusting.send(ids("typed"), 5),
                trusting.send(ids("later")),
            ),
        )
        subscriptions.subscribe("typed", endpoint="t")
        subscriptions.subscribe("later", endpoint="l")

        assert trusting.send(ids("B")) is True
        assert journal == ["post l later"]
        assert trusting.pending_count == 0
        assert not trusting.is_dispatching
        assert any(level == "error" and "queued message" in message
                   for level, message in sink.records)

    def test_queue_cleared_when_dispatch_unwinds(
        self, dispatcher, subscriptions, delivery, ids, journal, monkeypatch
    ):
        subscriptions.subscribe("B", hook=lambda mid, p: dispatcher.send(ids("A")))
        subscriptions.subscribe("A", endpoint="a")

        def interrupted():
            raise KeyboardInterrupt

        monkeypatch.setattr(dispatcher, "_drain", interrupted)
        with pytest.raises(KeyboardInterrupt):
            dispatcher.send(ids("B"))

        assert dispatcher.pending_count == 0
        assert not dispatcher.is_dispatching
        monkeypatch.undo()
        subscriptions.subscribe("C", endpoint="c")
        dispatcher.send(ids("C"))
        assert journal == ["post c C"]


# ══════════════════════════════════════════════════════════════
# SEND TO
# ══════════════════════════════════════════════════════════════

class TestSendTo:
    def test_ignores_subscriptions(self, dispatcher, ids, journal):
        assert dispatcher.send_to("target", ids("B"), {"v": 1}) is True
        assert journal == ["post target B"]

    def test_does_not_call_hooks(self, dispatcher, subscriptions, ids, journal):
        subscriptions.subscribe("B", hook=recording_hook(journal, "hook B"))
        dispatcher.send_to("target", ids("B"))
        assert journal == ["post target B"]

    def test_validates_payload(self, dispatcher, schemas, ids, journal):
        schemas.define("B", {"v": "number"})
        with pytest.raises(ValidationFailed) as exc_info:
            dispatcher.send_to("target", ids("B"), {"v": "bad"})
        assert exc_info.value.rejection.field == "v"
        assert journal == []

    @pytest.mark.parametrize("endpoint", [None, ""])
    def test_endpoint_required(self, dispatcher, ids, journal, endpoint):
        with pytest.raises(InvalidEndpoint):
            dispatcher.send_to(endpoint, ids("B"))
        assert journal == []

    def test_delivery_failure_reported(self, dispatcher, delivery, ids):
        def explode(endpoint, message_id, payload):
            raise ConnectionError("endpoint gone")

        delivery.on_post = explode
        assert dispatcher.send_to("target", ids("B")) is False

    def test_trusting_mode_skips_endpoint_check(
        self, subscriptions, schemas, delivery, log, ids, journal
    ):
        trusting = Dispatcher(
            subscriptions, PayloadValidator(schemas, strict=False), delivery, log,
            strict=False,
        )
        assert trusting.send_to(None, ids("B")) is True
        assert journal == ["post None B"]
