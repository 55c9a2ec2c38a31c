"""
Subscription handles and their delivery queues.

A subscription is one consumer's registration with a channel. It owns a
bounded asyncio queue living on the consumer's event loop. Channels push into
the queue from whatever thread publishes; the consumer pulls with async
iteration.

Delivery Path
-------------
::

    publisher thread                      consumer loop
    ----------------                      -------------
    Channel.publish
      -> Subscription.offer
           predicate(event)?
           same thread as loop?  --yes-->  _enqueue (direct)
                                 --no--->  loop.call_soon_threadsafe(_enqueue)
                                                 |
                                           asyncio.Queue  --> __anext__ / get / take

Enqueueing never waits. When the queue is full the oldest pending event is
evicted, so a slow consumer only ever loses its own backlog.

Lifecycle
---------
::

    ACTIVE --> CANCELLED

Cancellation is terminal and idempotent. It clears pending events and wakes
any consumer suspended in `__anext__`, which then stops iteration.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Final, Generic, Self, TypeVar

from chain_events import metrics

from .config import DEFAULT_SUBSCRIPTION_BUFFER

if TYPE_CHECKING:
    from .channel import Channel

logger = logging.getLogger(__name__)

E = TypeVar("E")

EventPredicate = Callable[[Any], bool]
"""Server-side filter. Returns True for events the subscription should see."""

_CLOSED: Final = object()
"""Queue sentinel marking the end of a cancelled subscription."""


class SubscriptionState(Enum):
    """Lifecycle state of a subscription."""

    ACTIVE = auto()
    """Receiving events."""

    CANCELLED = auto()
    """Detached from its channel. Terminal."""


def _on_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
    """Check whether the caller is running inside `loop`."""
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


@dataclass(slots=True, eq=False)
class Subscription(Generic[E]):
    """
    One active observer of one channel.

    Consume with any of::

        async for event in subscription: ...
        event = await subscription.get(timeout=1.0)
        events = await subscription.take(3)

    Use as an async context manager to cancel on exit.
    """

    id: int
    """Unique id within the owning channel."""

    channel: Channel[E]
    """Channel this subscription is attached to."""

    loop: asyncio.AbstractEventLoop
    """Event loop the consumer runs on. The queue lives here."""

    predicate: EventPredicate | None = None
    """Optional filter applied before enqueueing."""

    maxsize: int = DEFAULT_SUBSCRIPTION_BUFFER
    """Queue capacity. The oldest event is dropped beyond this."""

    _queue: asyncio.Queue[Any] = field(init=False)
    """Pending events, plus the close sentinel once cancelled."""

    _state: SubscriptionState = field(default=SubscriptionState.ACTIVE, init=False)
    """Current lifecycle state."""

    _consumed: int = field(default=0, init=False)
    """Events handed to the consumer."""

    _dropped: int = field(default=0, init=False)
    """Events evicted because the queue was full."""

    def __post_init__(self) -> None:
        """Create the bounded delivery queue."""
        self._queue = asyncio.Queue(maxsize=self.maxsize)

    @property
    def state(self) -> SubscriptionState:
        """Current lifecycle state."""
        return self._state

    @property
    def active(self) -> bool:
        """Whether the subscription still receives events."""
        return self._state is SubscriptionState.ACTIVE

    @property
    def consumed(self) -> int:
        """Number of events the consumer has received."""
        return self._consumed

    @property
    def dropped(self) -> int:
        """Number of events lost to the slow-consumer policy."""
        return self._dropped

    @property
    def pending(self) -> int:
        """Number of events waiting in the queue."""
        if not self.active:
            return 0
        return self._queue.qsize()

    def offer(self, event: E) -> bool:
        """
        Hand an event to this subscription.

        Called by the owning channel, under its lock, from the publishing
        thread. Never waits.

        Returns:
            True if the event passed the filter and was queued for delivery.

        Raises:
            Exception: Whatever the predicate raises, or RuntimeError if the
                consumer loop is closed. The channel treats both as a failed
                subscriber.
        """
        if self._state is not SubscriptionState.ACTIVE:
            return False
        if self.predicate is not None and not self.predicate(event):
            return False

        if _on_loop_thread(self.loop):
            self._enqueue(event)
        else:
            self.loop.call_soon_threadsafe(self._enqueue, event)
        return True

    def _enqueue(self, event: E) -> None:
        """Put an event on the queue, evicting the oldest if full. Loop thread only."""
        # Cancelled between scheduling and running.
        if self._state is not SubscriptionState.ACTIVE:
            return

        if self._queue.full():
            self._queue.get_nowait()
            self._dropped += 1
            metrics.events_dropped.labels(kind=self.channel.kind).inc()
            logger.debug(
                "Subscription %d on %s is full, dropped oldest event",
                self.id,
                self.channel.kind,
            )

        self._queue.put_nowait(event)

    def cancel(self) -> None:
        """Detach from the channel. Idempotent."""
        self.channel.unsubscribe(self)

    def terminate(self) -> None:
        """
        Mark cancelled and wake the consumer.

        Called by the owning channel once the subscription is no longer in
        its subscriber set. Idempotent.
        """
        if self._state is SubscriptionState.CANCELLED:
            return
        self._state = SubscriptionState.CANCELLED

        if _on_loop_thread(self.loop):
            self._close_queue()
            return

        # A closed loop has no consumer left to wake.
        with contextlib.suppress(RuntimeError):
            self.loop.call_soon_threadsafe(self._close_queue)

    def _close_queue(self) -> None:
        """Discard pending events and leave the close sentinel. Loop thread only."""
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    async def _next(self) -> Any:
        """Wait for the next event, or return the close sentinel."""
        if self._state is SubscriptionState.CANCELLED and self._queue.empty():
            return _CLOSED

        item = await self._queue.get()
        if item is _CLOSED or self._state is SubscriptionState.CANCELLED:
            # Keep the sentinel for other waiters and later calls.
            if self._queue.empty():
                self._queue.put_nowait(_CLOSED)
            return _CLOSED

        self._consumed += 1
        return item

    def __aiter__(self) -> Self:
        """Return self as async iterator."""
        return self

    async def __anext__(self) -> E:
        """Wait for the next event. Stops once the subscription is cancelled."""
        item = await self._next()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def get(self, timeout: float | None = None) -> E | None:
        """
        Wait for the next event for at most `timeout` seconds.

        Returns:
            The next event, or None on timeout or after cancellation.
            A timeout leaves the subscription active.
        """
        try:
            async with asyncio.timeout(timeout):
                item = await self._next()
        except TimeoutError:
            return None
        return None if item is _CLOSED else item

    async def take(self, count: int, timeout: float | None = None) -> list[E]:
        """
        Collect the next `count` events.

        Returns fewer than `count` if the subscription is cancelled first or
        the overall `timeout` expires.
        """
        events: list[E] = []
        try:
            async with asyncio.timeout(timeout):
                while len(events) < count:
                    item = await self._next()
                    if item is _CLOSED:
                        break
                    events.append(item)
        except TimeoutError:
            pass
        return events

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.cancel()
