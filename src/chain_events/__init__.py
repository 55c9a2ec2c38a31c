"""
Event broadcast and preload progress sequencing for a blockchain node.

Engine threads publish lifecycle events into an `EventBroadcastHub`. Any
number of independent subscribers consume them through per-kind channels,
each with its own filter and its own delivery queue, without ever blocking
the publisher.
"""

from .config import HubConfig
from .events import EventKind
from .hub import EventBroadcastHub

__all__ = [
    "EventBroadcastHub",
    "EventKind",
    "HubConfig",
]
