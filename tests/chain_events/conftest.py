"""
Shared pytest fixtures for chain_events tests.

Provides hubs, protocol versions, and event builders used across test modules.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from chain_events import EventBroadcastHub, HubConfig
from chain_events.events import ActionEvaluatedEvent, ProtocolVersion, TipChangedEvent

SIGNER = "0x0000000000000000000000000000000000000000"
"""Canonical text form of the zero address."""


@pytest.fixture
def hub() -> Iterator[EventBroadcastHub]:
    """Hub torn down after the test."""
    with EventBroadcastHub(HubConfig()) as hub:
        yield hub


@pytest.fixture
def local_version() -> ProtocolVersion:
    """Protocol version 0 run by this node."""
    return ProtocolVersion(
        version_number=0,
        signer_identity="0x1C2Ee3f1A4bd2B5f43bE1d7d0c1F4a1b9c8eE4b2",
        signature=bytes.fromhex("3045022100aa"),
        extra=None,
    )


@pytest.fixture
def peer_version() -> ProtocolVersion:
    """Protocol version 1 announced by a peer, same signer."""
    return ProtocolVersion(
        version_number=1,
        signer_identity="0x1C2Ee3f1A4bd2B5f43bE1d7d0c1F4a1b9c8eE4b2",
        signature=bytes.fromhex("3045022100bb"),
        extra=b"\x01\x02",
    )


@pytest.fixture
def tip_factory() -> Callable[[int], TipChangedEvent]:
    """Build tip change events whose hash encodes the index."""

    def _create(index: int) -> TipChangedEvent:
        return TipChangedEvent(block_index=index, block_hash=index.to_bytes(32, "big"))

    return _create


@pytest.fixture
def action_factory() -> Callable[..., ActionEvaluatedEvent]:
    """Build action evaluation events."""

    def _create(
        action_kind: str,
        serialized_action: bytes = b"\xde\xad\xbe\xef",
        block_index: int = 1000,
        signer_identity: str = SIGNER,
    ) -> ActionEvaluatedEvent:
        return ActionEvaluatedEvent(
            action_kind=action_kind,
            serialized_action=serialized_action,
            block_index=block_index,
            signer_identity=signer_identity,
        )

    return _create
