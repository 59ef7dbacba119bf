"""
Roost Subscriptions — Public API
==================================
Subscriber bookkeeping and the message → subscriber index.
"""

from roost.subscriptions.registry import (
    EndpointResolver,
    EventIndexEntry,
    Hook,
    Subscriber,
    SubscriptionRegistry,
    is_subscriber_id,
)

__all__ = [
    "Subscriber",
    "EventIndexEntry",
    "SubscriptionRegistry",
    "Hook",
    "EndpointResolver",
    "is_subscriber_id",
]
