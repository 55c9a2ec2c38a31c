"""
Engine integration hooks.

The sync/consensus engine is configured at construction with plain callables
it invokes from its own threads: on a new tip, on preload progress, when a
peer on another protocol version shows up, when a fault occurs, and after
each action evaluation. `EngineHooks` supplies those callables, bound to an
explicit hub.

Every hook shields the engine from this subsystem: malformed input is logged
and dropped, never raised into the engine thread.

Wiring
------
::

    hub = EventBroadcastHub()
    hooks = EngineHooks.create(hub, local_version)

    engine = Engine(
        on_tip_changed=hooks.tip_changed,
        preload_progress=hooks.preload_progress,
        on_preload_ended=hooks.preload_ended,
        different_protocol_version_encountered=hooks.different_protocol_version_encountered,
        node_exception_occurred=hooks.node_exception_occurred,
        on_action_evaluated=hooks.action_evaluated,
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chain_events.events import NodeFaultCode, PreloadPhase, ProtocolVersion
from chain_events.faults import NodeFaultReporter
from chain_events.hub import EventBroadcastHub
from chain_events.protocol import AcceptPolicy, ProtocolVersionGuard, reject_mismatch
from chain_events.types import ChainEventsError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EngineHooks:
    """Callables handed to the engine, all publishing into one hub."""

    hub: EventBroadcastHub
    """Hub every hook publishes into."""

    guard: ProtocolVersionGuard
    """Decides on peers running another protocol version."""

    fault_reporter: NodeFaultReporter
    """Turns engine faults into fault events."""

    @classmethod
    def create(
        cls,
        hub: EventBroadcastHub,
        local_version: ProtocolVersion,
        *,
        accept_policy: AcceptPolicy = reject_mismatch,
        report_mismatches: bool = True,
    ) -> EngineHooks:
        """
        Build the hooks for one hub.

        Args:
            hub: Hub to publish into.
            local_version: Protocol version this node runs.
            accept_policy: Verdict for peers on another version.
            report_mismatches: Whether mismatches are published.
        """
        guard = ProtocolVersionGuard(
            local_version=local_version,
            publish_mismatch=hub.publish_protocol_version_mismatch,
            accept_policy=accept_policy,
            report_mismatches=report_mismatches,
        )
        return cls(
            hub=hub,
            guard=guard,
            fault_reporter=NodeFaultReporter(publish_fault=hub.publish_node_fault),
        )

    def tip_changed(self, block_index: int, block_hash: bytes) -> None:
        """The engine moved its tip."""
        try:
            self.hub.publish_tip_changed(block_index, block_hash)
        except ChainEventsError as e:
            logger.warning("Ignoring malformed tip change at %r: %s", block_index, e)

    def preload_progress(
        self,
        phase: PreloadPhase | str,
        current_count: int,
        total_count: int,
    ) -> None:
        """
        The engine reported preload progress.

        The hub starts a new action evaluation session when the first accepted
        callback of a run arrives, so late subscribers replay only that run.
        """
        try:
            self.hub.publish_preload_progress(phase, current_count, total_count)
        except ChainEventsError as e:
            logger.warning("Ignoring preload progress %r: %s", phase, e)

    def preload_ended(self) -> None:
        """The engine finished its preload run."""
        self.hub.end_preload()

    def different_protocol_version_encountered(
        self,
        peer: object,
        peer_version: ProtocolVersion,
        local_version: ProtocolVersion,
    ) -> bool:
        """
        A peer announced another protocol version.

        Returns:
            Whether the engine should keep talking to the peer.
        """
        return self.guard.evaluate(peer_version, local_version, peer_identity=str(peer))

    def node_exception_occurred(self, code: NodeFaultCode | int, message: str) -> None:
        """The engine raised a fault signal."""
        self.fault_reporter.report(code, message)

    def action_evaluated(
        self,
        action_kind: str,
        serialized_action: bytes,
        block_index: int,
        signer_identity: str,
    ) -> None:
        """The engine finished evaluating one action."""
        try:
            self.hub.publish_action_evaluated(
                action_kind, serialized_action, block_index, signer_identity
            )
        except ChainEventsError as e:
            logger.warning("Ignoring malformed %r evaluation: %s", action_kind, e)
