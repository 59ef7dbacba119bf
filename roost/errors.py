"""
Roost — Errors
================
Error taxonomy for every bus operation.

Components raise these. The MessageBus facade catches them,
logs them and reports failure through its return value.
Nothing here is fatal to the process.
"""

from __future__ import annotations

from typing import Any, Optional


# ══════════════════════════════════════════════════════════════
# ERROR CODES (exhaustive)
# ══════════════════════════════════════════════════════════════

class ErrorCode:
    """One code per failure kind."""

    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    INVALID_MESSAGES = "INVALID_MESSAGES"
    INVALID_HOOK = "INVALID_HOOK"
    INVALID_ID = "INVALID_ID"
    INVALID_ENDPOINT = "INVALID_ENDPOINT"
    INVALID_SCHEMA = "INVALID_SCHEMA"
    REDEFINITION_REJECTED = "REDEFINITION_REJECTED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NO_LISTENERS = "NO_LISTENERS"


# ══════════════════════════════════════════════════════════════
# BASE
# ══════════════════════════════════════════════════════════════

class RoostError(Exception):
    """Base error for message bus operations."""

    code: str = ""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ══════════════════════════════════════════════════════════════
# IDENTIFIERS
# ══════════════════════════════════════════════════════════════

class InvalidIdentifier(RoostError):
    """Value is neither a message name nor a canonical MessageId."""

    code = ErrorCode.INVALID_IDENTIFIER

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Message id {value!r} is neither a string nor a MessageId."
        )


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTIONS
# ══════════════════════════════════════════════════════════════

class InvalidMessages(RoostError):
    """Subscription list is missing, empty or of the wrong shape."""

    code = ErrorCode.INVALID_MESSAGES

    def __init__(self, messages: Any):
        self.messages = messages
        super().__init__(
            f"Messages must be a message id or a non-empty sequence "
            f"of message ids, got {type(messages).__name__}."
        )


class InvalidHook(RoostError):
    """Hook was given but is not callable."""

    code = ErrorCode.INVALID_HOOK

    def __init__(self, hook: Any):
        self.hook = hook
        super().__init__(
            f"Hook must be callable, got {type(hook).__name__}."
        )


class InvalidId(RoostError):
    """Subscriber id is present but is not an integer."""

    code = ErrorCode.INVALID_ID

    def __init__(self, subscriber_id: Any):
        self.subscriber_id = subscriber_id
        super().__init__(
            f"Subscriber id must be an integer, got {subscriber_id!r}."
        )


# ══════════════════════════════════════════════════════════════
# DISPATCH
# ══════════════════════════════════════════════════════════════

class InvalidEndpoint(RoostError):
    """Endpoint is missing or no caller endpoint is active."""

    code = ErrorCode.INVALID_ENDPOINT

    def __init__(self, message: str = "Endpoint is not given."):
        super().__init__(message)


class NoListeners(RoostError):
    """Nobody is subscribed to the message. Reported as a warning."""

    code = ErrorCode.NO_LISTENERS

    def __init__(self, message_id: Any):
        self.message_id = message_id
        super().__init__(
            f"Message {message_id} is not subscribed to by anything."
        )


# ══════════════════════════════════════════════════════════════
# SCHEMAS
# ══════════════════════════════════════════════════════════════

class InvalidSchema(RoostError):
    """Schema is not a mapping of field names to known type tags."""

    code = ErrorCode.INVALID_SCHEMA


class RedefinitionRejected(RoostError):
    """Existing definition kept: the new schema is missing or empty."""

    code = ErrorCode.REDEFINITION_REJECTED

    def __init__(self, message_id: Any):
        self.message_id = message_id
        super().__init__(
            f"Failed to redefine message {message_id}. "
            f"A non-empty schema mapping is required."
        )


class ValidationFailed(RoostError):
    """Payload does not satisfy the message schema."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message_id: Any, rejection: Optional[Any] = None):
        self.message_id = message_id
        self.rejection = rejection
        detail = rejection.message if rejection is not None else "invalid payload"
        super().__init__(f"Message {message_id} rejected: {detail}")
