"""
Event broadcast hub.

The hub is the aggregate root of the subsystem. It owns one channel per event
kind and is the only entry point engine code and the subscription layer use.

Channels
--------
::

    tipChanged               Channel        live only
    preloadProgress          Channel        live only, fed by the sequencer
    protocolVersionMismatch  Channel        live only
    nodeFault                Channel        live only
    actionEvaluated          ReplayChannel  replays the current session

Lifetime
--------
A hub is an explicit value. Create one per node, pass it to every component
that publishes or subscribes, and close it on teardown. Closing rejects new
subscriptions and cancels every outstanding one. Publishing to a closed hub
is a silent no-op so engine threads racing shutdown are never interrupted.
"""

from __future__ import annotations

import logging
from typing import Any, Self, TypeVar

from pydantic import ValidationError

from chain_events import metrics
from chain_events.broadcast import (
    ActionEvaluationFilter,
    Channel,
    EventPredicate,
    ReplayChannel,
    Subscription,
)
from chain_events.config import HubConfig
from chain_events.events import (
    ActionEvaluatedEvent,
    Event,
    EventKind,
    NodeFaultCode,
    NodeFaultEvent,
    PreloadPhase,
    PreloadProgressEvent,
    ProtocolVersion,
    ProtocolVersionMismatchEvent,
    TipChangedEvent,
)
from chain_events.preload import PreloadProgressSequencer, build_record
from chain_events.types import HubClosedError, ProducerError

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT", bound=Event)


class EventBroadcastHub:
    """Owns the per-kind channels and exposes publish and subscribe entry points."""

    def __init__(self, config: HubConfig | None = None) -> None:
        self.config = config or HubConfig()
        """Queue and replay sizing."""

        buffer = self.config.subscription_buffer
        self._action_channel: ReplayChannel[ActionEvaluatedEvent] = ReplayChannel(
            EventKind.ACTION_EVALUATED,
            subscription_buffer=buffer,
            replay_limit=self.config.replay_limit,
        )
        self._channels: dict[EventKind, Channel[Any]] = {
            EventKind.TIP_CHANGED: Channel(EventKind.TIP_CHANGED, subscription_buffer=buffer),
            EventKind.PRELOAD_PROGRESS: Channel(
                EventKind.PRELOAD_PROGRESS, subscription_buffer=buffer
            ),
            EventKind.PROTOCOL_VERSION_MISMATCH: Channel(
                EventKind.PROTOCOL_VERSION_MISMATCH, subscription_buffer=buffer
            ),
            EventKind.NODE_FAULT: Channel(EventKind.NODE_FAULT, subscription_buffer=buffer),
            EventKind.ACTION_EVALUATED: self._action_channel,
        }

        self.preload = PreloadProgressSequencer(
            publish=self._channels[EventKind.PRELOAD_PROGRESS].publish,
            on_run_start=self.reset_session,
        )
        """Sequencer feeding the preload progress channel. Each new run starts a new session."""

        self._closed = False
        logger.info("Event hub created (subscription buffer %d)", buffer)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        """Whether the hub has been torn down."""
        return self._closed

    def close(self) -> None:
        """Tear down every channel. Idempotent."""
        if self._closed:
            return
        self._closed = True

        for channel in self._channels.values():
            channel.close()
        logger.info("Event hub closed")

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def reset_session(self) -> None:
        """
        Discard the action evaluation replay buffer.

        Runs automatically when the first accepted progress callback of a preload
        run arrives.
        """
        self.action_channel.reset_session()

    # -------------------------------------------------------------------------
    # Channels
    # -------------------------------------------------------------------------

    def channel(self, kind: EventKind | str) -> Channel[Any]:
        """Return the channel carrying `kind` events."""
        return self._channels[EventKind(kind)]

    @property
    def action_channel(self) -> ReplayChannel[ActionEvaluatedEvent]:
        """Replay channel carrying action evaluations."""
        return self._action_channel

    def subscriber_counts(self) -> dict[str, int]:
        """Number of active subscriptions per kind."""
        return {str(kind): channel.subscriber_count for kind, channel in self._channels.items()}

    # -------------------------------------------------------------------------
    # Subscribe
    # -------------------------------------------------------------------------

    def subscribe(
        self,
        kind: EventKind | str,
        predicate: EventPredicate | None = None,
    ) -> Subscription[Any]:
        """
        Subscribe to one event kind on the running event loop.

        Raises:
            HubClosedError: If the hub has been closed.
            ValueError: If `kind` is not a known event kind.
        """
        if self._closed:
            raise HubClosedError("event hub")
        return self.channel(kind).subscribe(predicate)

    def subscribe_action_evaluations(
        self,
        action_kind: str | None = None,
    ) -> Subscription[ActionEvaluatedEvent]:
        """Subscribe to action evaluations, optionally only those of one action kind."""
        return self.subscribe(EventKind.ACTION_EVALUATED, ActionEvaluationFilter(action_kind))

    # -------------------------------------------------------------------------
    # Publish
    # -------------------------------------------------------------------------

    def publish_tip_changed(self, block_index: int, block_hash: bytes) -> TipChangedEvent:
        """Publish a chain tip change."""
        event = _build(TipChangedEvent, block_index=block_index, block_hash=block_hash)
        self._publish(event)
        return event

    def publish_preload_progress(
        self,
        phase: PreloadPhase | str,
        current_count: int,
        total_count: int,
    ) -> PreloadProgressEvent:
        """
        Publish one preload progress callback through the sequencer.

        A closed hub still validates the callback but leaves the sequencer untouched.
        """
        if self._closed:
            return build_record(phase, current_count, total_count)
        return self.preload.on_progress(phase, current_count, total_count)

    def end_preload(self) -> None:
        """Signal that the current preload run ended. Ignored once the hub is closed."""
        if self._closed:
            return
        self.preload.end_run()

    def publish_protocol_version_mismatch(
        self,
        peer_identity: str,
        peer_version: ProtocolVersion,
        local_version: ProtocolVersion,
    ) -> ProtocolVersionMismatchEvent:
        """Publish an encounter with a peer on a different protocol version."""
        event = _build(
            ProtocolVersionMismatchEvent,
            peer_identity=peer_identity,
            peer_version=peer_version,
            local_version=local_version,
        )
        self._publish(event)
        return event

    def publish_node_fault(self, code: NodeFaultCode | int, message: str) -> NodeFaultEvent:
        """Publish an engine fault."""
        try:
            fault_code = NodeFaultCode(code)
        except ValueError as e:
            metrics.events_rejected.labels(kind=EventKind.NODE_FAULT).inc()
            raise ProducerError(EventKind.NODE_FAULT, f"unknown fault code {code!r}") from e

        event = _build(NodeFaultEvent, code=fault_code, message=message)
        self._publish(event)
        return event

    def publish_action_evaluated(
        self,
        action_kind: str,
        serialized_action: bytes,
        block_index: int,
        signer_identity: str,
    ) -> ActionEvaluatedEvent:
        """Publish the outcome of one action evaluation."""
        event = _build(
            ActionEvaluatedEvent,
            action_kind=action_kind,
            serialized_action=serialized_action,
            block_index=block_index,
            signer_identity=signer_identity,
        )
        self._publish(event)
        return event

    def _publish(self, event: Event) -> int:
        return self._channels[event.kind].publish(event)


def _build(model: type[EventT], **fields: Any) -> EventT:
    """Validate producer input into an event, or reject the call."""
    try:
        return model(**fields)
    except ValidationError as e:
        metrics.events_rejected.labels(kind=model.kind).inc()
        raise ProducerError(model.kind, str(e)) from e
