"""
Broadcast primitives for fanning events out to independent subscribers.

- `Channel`: live-only, one producer side, N subscribers
- `ReplayChannel`: Channel plus a session-scoped replay buffer
- `Subscription`: one subscriber's handle and async event sequence
- `ActionEvaluationFilter`: predicate on the action kind of evaluated actions
"""

from __future__ import annotations

__all__ = [
    # Channels
    "Channel",
    "ReplayChannel",
    # Subscriptions
    "EventPredicate",
    "Subscription",
    "SubscriptionState",
    # Filters
    "ActionEvaluationFilter",
    # Configuration constants
    "DEFAULT_REPLAY_LIMIT",
    "DEFAULT_SUBSCRIPTION_BUFFER",
]

from .channel import Channel
from .config import DEFAULT_REPLAY_LIMIT, DEFAULT_SUBSCRIPTION_BUFFER
from .filters import ActionEvaluationFilter
from .replay import ReplayChannel
from .subscription import EventPredicate, Subscription, SubscriptionState
