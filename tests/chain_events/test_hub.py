"""Tests for the event broadcast hub."""

from __future__ import annotations

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from chain_events import EventBroadcastHub, EventKind, HubConfig
from chain_events.broadcast import ReplayChannel, SubscriptionState
from chain_events.events import (
    NodeFaultCode,
    PreloadPhase,
    ProtocolVersion,
    TipChangedEvent,
)
from chain_events.types import HubClosedError, ProducerError

SIGNER = "0x0000000000000000000000000000000000000000"
"""Signer identity attached to published evaluations."""


class TestTipOrdering:
    """Tests for ordered delivery of tip changes."""

    @settings(max_examples=25)
    @given(
        st.lists(
            st.integers(min_value=0, max_value=2**40), min_size=1, max_size=50, unique=True
        )
    )
    def test_subscriber_sees_tips_in_publish_order(self, indices: list[int]) -> None:
        """N increasing tip changes arrive as N events in the same order."""
        indices.sort()

        async def run_test() -> list[int]:
            with EventBroadcastHub() as hub:
                subscription = hub.subscribe(EventKind.TIP_CHANGED)
                for index in indices:
                    hub.publish_tip_changed(index, index.to_bytes(32, "big"))
                events = await subscription.take(len(indices), timeout=1.0)
                assert await subscription.get(timeout=0.01) is None
                return [event.block_index for event in events]

        assert asyncio.run(run_test()) == indices

    async def test_tip_record_has_lowercase_hex_hash(self, hub: EventBroadcastHub) -> None:
        """The hash renders as lowercase hex without a prefix."""
        subscription = hub.subscribe(EventKind.TIP_CHANGED)
        hub.publish_tip_changed(7, bytes.fromhex("ABCDEF01"))

        event = await subscription.get(timeout=1.0)
        assert isinstance(event, TipChangedEvent)
        assert event.to_record() == {"blockIndex": 7, "blockHash": "abcdef01"}


class TestRouting:
    """Tests for per-kind channels."""

    async def test_each_kind_reaches_only_its_subscribers(
        self,
        hub: EventBroadcastHub,
        peer_version: ProtocolVersion,
        local_version: ProtocolVersion,
    ) -> None:
        """Every publish lands in exactly one channel."""
        subscriptions = {kind: hub.subscribe(kind) for kind in EventKind}

        hub.publish_tip_changed(1, b"\x01")
        hub.publish_preload_progress(PreloadPhase.HASH_DOWNLOAD, 0, 10)
        hub.publish_protocol_version_mismatch("peer", peer_version, local_version)
        hub.publish_node_fault(NodeFaultCode.TIP_NOT_CHANGE, "stuck")
        hub.publish_action_evaluated("Buy", b"\x00", 3, SIGNER)

        for kind, subscription in subscriptions.items():
            [event] = await subscription.take(1, timeout=1.0)
            assert event.kind is kind
            assert await subscription.get(timeout=0.01) is None

    async def test_string_kinds_accepted(self, hub: EventBroadcastHub) -> None:
        """Kinds may be given by their wire names."""
        subscription = hub.subscribe("nodeFault")
        hub.publish_node_fault(1, "no peers")

        event = await subscription.get(timeout=1.0)
        assert event is not None
        assert event.code is NodeFaultCode.NO_ANY_PEER

    def test_unknown_kind_rejected(self, hub: EventBroadcastHub) -> None:
        """Subscribing to an unknown kind is an error."""
        with pytest.raises(ValueError):
            hub.channel("blockMined")

    def test_only_action_channel_replays(self, hub: EventBroadcastHub) -> None:
        """Action evaluations are the only replayed kind."""
        replaying = [kind for kind in EventKind if isinstance(hub.channel(kind), ReplayChannel)]
        assert replaying == [EventKind.ACTION_EVALUATED]
        assert hub.channel(EventKind.ACTION_EVALUATED) is hub.action_channel


class TestProducerValidation:
    """Tests for rejecting malformed producer input."""

    def test_negative_block_index(self, hub: EventBroadcastHub) -> None:
        """Tip changes need a non-negative index."""
        with pytest.raises(ProducerError) as exc_info:
            hub.publish_tip_changed(-1, b"\x01")
        assert exc_info.value.kind == EventKind.TIP_CHANGED

    def test_text_block_hash(self, hub: EventBroadcastHub) -> None:
        """Tip hashes must be bytes."""
        with pytest.raises(ProducerError):
            hub.publish_tip_changed(1, "abcdef")  # type: ignore[arg-type]

    def test_unknown_fault_code(self, hub: EventBroadcastHub) -> None:
        """Fault codes come from a closed set."""
        with pytest.raises(ProducerError) as exc_info:
            hub.publish_node_fault(0x42, "unknown")
        assert exc_info.value.kind == EventKind.NODE_FAULT

    def test_empty_action_kind(self, hub: EventBroadcastHub) -> None:
        """Action evaluations need a kind."""
        with pytest.raises(ProducerError):
            hub.publish_action_evaluated("", b"\x00", 1, SIGNER)

    def test_producer_error_is_value_error(self, hub: EventBroadcastHub) -> None:
        """Callers catching ValueError also catch producer errors."""
        with pytest.raises(ValueError):
            hub.publish_tip_changed(-5, b"")

    async def test_rejected_publish_delivers_nothing(self, hub: EventBroadcastHub) -> None:
        """A rejected call leaves subscribers untouched."""
        subscription = hub.subscribe(EventKind.TIP_CHANGED)
        with pytest.raises(ProducerError):
            hub.publish_tip_changed(-1, b"\x01")

        assert await subscription.get(timeout=0.05) is None


class TestActionReplay:
    """Tests for replaying action evaluations through the hub."""

    async def test_late_subscriber_gets_session_then_live(self, hub: EventBroadcastHub) -> None:
        """K buffered evaluations then one live evaluation, nothing more."""
        for index in range(4):
            hub.publish_action_evaluated("Buy", bytes([index]), index, SIGNER)

        subscription = hub.subscribe_action_evaluations()
        hub.publish_action_evaluated("Buy", b"\x04", 4, SIGNER)

        events = await subscription.take(5, timeout=1.0)
        assert [event.block_index for event in events] == [0, 1, 2, 3, 4]
        assert await subscription.get(timeout=0.05) is None

    async def test_filtered_subscription(self, hub: EventBroadcastHub) -> None:
        """Only the requested action kind is delivered."""
        for kind in ("Buy", "Buy", "Sell", "TransferAsset", "TransferAsset"):
            hub.publish_action_evaluated(kind, b"\x00", 1, SIGNER)

        subscription = hub.subscribe_action_evaluations("Sell")

        events = await subscription.take(1, timeout=1.0)
        assert [event.action_kind for event in events] == ["Sell"]
        assert await subscription.get(timeout=0.05) is None

    async def test_reset_session_discards_backlog(self, hub: EventBroadcastHub) -> None:
        """A new session replays nothing from the previous one."""
        hub.publish_action_evaluated("Buy", b"\x00", 1, SIGNER)
        hub.reset_session()

        subscription = hub.subscribe_action_evaluations()
        assert await subscription.get(timeout=0.05) is None
        assert hub.action_channel.buffered == ()

    def test_replay_limit_from_config(self) -> None:
        """Only the most recent evaluations are kept."""
        with EventBroadcastHub(HubConfig(replay_limit=2)) as hub:
            for index in range(5):
                hub.publish_action_evaluated("Buy", b"\x00", index, SIGNER)

            assert [event.block_index for event in hub.action_channel.buffered] == [3, 4]


class TestLifecycle:
    """Tests for closing the hub."""

    async def test_subscribe_after_close(self) -> None:
        """A closed hub accepts no subscriptions."""
        hub = EventBroadcastHub()
        hub.close()

        with pytest.raises(HubClosedError):
            hub.subscribe(EventKind.TIP_CHANGED)

    async def test_close_ends_subscriptions(self) -> None:
        """Outstanding subscriptions finish their iteration on close."""
        hub = EventBroadcastHub()
        subscription = hub.subscribe(EventKind.NODE_FAULT)
        hub.close()

        assert subscription.state is SubscriptionState.CANCELLED
        assert [event async for event in subscription] == []

    def test_publish_after_close_is_silent(self) -> None:
        """Engine threads racing shutdown are not interrupted."""
        hub = EventBroadcastHub()
        hub.close()

        event = hub.publish_tip_changed(1, b"\x01")
        assert event.block_index == 1

    def test_preload_after_close_leaves_sequencer_untouched(self) -> None:
        """A closed hub validates progress but neither advances nor ends runs."""
        hub = EventBroadcastHub()
        hub.publish_preload_progress(PreloadPhase.BLOCK_VERIFICATION, 1, 1)
        hub.close()

        record = hub.publish_preload_progress(PreloadPhase.HASH_DOWNLOAD, 0, 0)
        hub.end_preload()

        assert record.phase_index == 1
        assert hub.preload.current_phase == 3
        assert hub.preload.runs_completed == 0
        with pytest.raises(ProducerError):
            hub.publish_preload_progress(PreloadPhase.HASH_DOWNLOAD, -1, 0)

    def test_close_is_idempotent(self) -> None:
        """Closing twice is harmless."""
        hub = EventBroadcastHub()
        hub.close()
        hub.close()
        assert hub.closed

    def test_context_manager_closes(self) -> None:
        """Leaving the with-block closes the hub."""
        with EventBroadcastHub() as hub:
            assert not hub.closed
        assert hub.closed

    async def test_subscriber_counts(self, hub: EventBroadcastHub) -> None:
        """Counts track subscribe and cancel per kind."""
        first = hub.subscribe(EventKind.TIP_CHANGED)
        hub.subscribe(EventKind.TIP_CHANGED)
        hub.subscribe_action_evaluations("Buy")

        counts = hub.subscriber_counts()
        assert counts["tipChanged"] == 2
        assert counts["actionEvaluated"] == 1
        assert counts["nodeFault"] == 0

        first.cancel()
        assert hub.subscriber_counts()["tipChanged"] == 1
