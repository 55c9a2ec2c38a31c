"""
Replay channel: a broadcast channel that remembers the current session.

A subscriber attaching late still reconstructs the full sequence of events
published since the last session reset. Replay and live delivery join without
a gap or a duplicate because buffering, replay, and fan-out all happen under
the channel lock::

    publish(e1) publish(e2) | subscribe | publish(e3)
                            |
    late subscriber sees:   e1 e2 (replayed) e3 (live)

The buffer is session scoped. `reset_session()` empties it at the start of a
new sync run.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TypeVar

from .channel import Channel
from .config import DEFAULT_REPLAY_LIMIT, DEFAULT_SUBSCRIPTION_BUFFER
from .subscription import Subscription

logger = logging.getLogger(__name__)

E = TypeVar("E")


class ReplayChannel(Channel[E]):
    """Channel that replays the current session to new subscribers."""

    def __init__(
        self,
        kind: str,
        *,
        subscription_buffer: int = DEFAULT_SUBSCRIPTION_BUFFER,
        replay_limit: int | None = DEFAULT_REPLAY_LIMIT,
    ) -> None:
        if replay_limit is not None and replay_limit < 1:
            raise ValueError(f"replay_limit must be positive or None, got {replay_limit}")

        super().__init__(kind, subscription_buffer=subscription_buffer)

        self.replay_limit = replay_limit
        """Maximum events retained per session. None keeps them all."""

        self._buffer: deque[E] = deque(maxlen=replay_limit)

    @property
    def buffered(self) -> tuple[E, ...]:
        """Snapshot of the events retained for the current session."""
        with self._lock:
            return tuple(self._buffer)

    def reset_session(self) -> None:
        """
        Start a new session by discarding all retained events.

        Atomic with respect to subscribe: a concurrent subscriber sees either
        the whole old buffer or an empty one.
        """
        with self._lock:
            discarded = len(self._buffer)
            self._buffer.clear()

        logger.info("Reset %s replay session, discarded %d events", self.kind, discarded)

    def _queue_size(self) -> int:
        # Room for the full replay so attaching never evicts buffered events.
        return max(self.subscription_buffer, len(self._buffer))

    def _record(self, event: E) -> None:
        self._buffer.append(event)

    def _attach(self, subscription: Subscription[E]) -> None:
        for event in self._buffer:
            subscription.offer(event)
