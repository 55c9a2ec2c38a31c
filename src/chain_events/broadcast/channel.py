"""
Broadcast channel: one producer side, many independent live subscribers.

Fan-Out
-------
A publish snapshots the subscriber set under the channel lock and offers the
event to each subscription in turn. Offering only enqueues, so a publish takes
bounded time no matter how many subscribers exist or how slowly they consume.

Holding the lock for the whole fan-out keeps each producer's events in
publish order for every subscriber, and subscribers on the same event loop
see one shared interleaving when several threads publish at once. Across
loops the interleaving of different producers may differ: an offer made on
the subscriber's own loop enqueues directly, others are scheduled onto it.

Failure Isolation
-----------------
If offering to one subscription raises (its filter throws, its event loop is
gone), that subscription alone is detached and cancelled. The publisher never
sees the error and the remaining subscribers are unaffected.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from typing import Generic, TypeVar

from chain_events import metrics
from chain_events.types import HubClosedError

from .config import DEFAULT_SUBSCRIPTION_BUFFER
from .subscription import EventPredicate, Subscription

logger = logging.getLogger(__name__)

E = TypeVar("E")


class Channel(Generic[E]):
    """
    Live-only broadcast channel for a single event kind.

    Subscribers see events published strictly after they subscribe.
    The channel keeps no history.
    """

    def __init__(
        self,
        kind: str,
        *,
        subscription_buffer: int = DEFAULT_SUBSCRIPTION_BUFFER,
    ) -> None:
        if subscription_buffer < 1:
            raise ValueError(f"subscription_buffer must be positive, got {subscription_buffer}")

        self.kind = str(kind)
        """Event kind name. Used in logs and metric labels."""

        self.subscription_buffer = subscription_buffer
        """Queue capacity given to each new subscription."""

        # Guards the subscriber set, the closed flag, and subclass state.
        self._lock = threading.Lock()
        self._subscriptions: dict[int, Subscription[E]] = {}
        self._ids = itertools.count(1)
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the channel has been torn down."""
        return self._closed

    @property
    def subscriber_count(self) -> int:
        """Number of currently attached subscriptions."""
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, predicate: EventPredicate | None = None) -> Subscription[E]:
        """
        Register a new subscriber on the running event loop.

        Args:
            predicate: Optional server-side filter.

        Returns:
            A subscription yielding matching events in publish order.

        Raises:
            HubClosedError: If the channel has been closed.
            RuntimeError: If called outside a running event loop.
        """
        loop = asyncio.get_running_loop()

        with self._lock:
            if self._closed:
                raise HubClosedError(f"{self.kind} channel")

            subscription: Subscription[E] = Subscription(
                id=next(self._ids),
                channel=self,
                loop=loop,
                predicate=predicate,
                maxsize=self._queue_size(),
            )
            self._attach(subscription)
            self._subscriptions[subscription.id] = subscription

        metrics.active_subscriptions.labels(kind=self.kind).inc()
        logger.debug("Subscription %d attached to %s", subscription.id, self.kind)
        return subscription

    def publish(self, event: E) -> int:
        """
        Deliver an event to every active subscription that accepts it.

        Never raises because of a subscriber. Publishing to a closed channel
        is a no-op.

        Returns:
            Number of subscriptions the event was queued for.
        """
        delivered = 0
        failed: list[Subscription[E]] = []

        with self._lock:
            if self._closed:
                logger.debug("Ignoring %s event published after close", self.kind)
                return 0

            self._record(event)

            for subscription in list(self._subscriptions.values()):
                try:
                    if subscription.offer(event):
                        delivered += 1
                except Exception as e:
                    logger.warning(
                        "Delivery to subscription %d on %s failed, cancelling it: %s",
                        subscription.id,
                        self.kind,
                        e,
                    )
                    del self._subscriptions[subscription.id]
                    failed.append(subscription)

        for subscription in failed:
            metrics.subscriber_failures.labels(kind=self.kind).inc()
            self._release(subscription)

        metrics.events_published.labels(kind=self.kind).inc()
        if delivered:
            metrics.events_delivered.labels(kind=self.kind).inc(delivered)
        return delivered

    def unsubscribe(self, subscription: Subscription[E]) -> None:
        """Detach a subscription. Idempotent."""
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None) is not None

        if removed:
            self._release(subscription)
            logger.debug("Subscription %d detached from %s", subscription.id, self.kind)
        else:
            subscription.terminate()

    def close(self) -> None:
        """Reject new subscribers and cancel every outstanding subscription."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()

        for subscription in subscriptions:
            self._release(subscription)

        logger.debug("Closed %s channel, cancelled %d subscriptions", self.kind, len(subscriptions))

    def _release(self, subscription: Subscription[E]) -> None:
        """Finish detaching a subscription already removed from the set."""
        metrics.active_subscriptions.labels(kind=self.kind).dec()
        subscription.terminate()

    def _queue_size(self) -> int:
        """Queue capacity for a subscription created now. Called under the lock."""
        return self.subscription_buffer

    def _record(self, event: E) -> None:
        """Hook run for every published event. Called under the lock."""

    def _attach(self, subscription: Subscription[E]) -> None:
        """Hook run before a new subscription is registered. Called under the lock."""
