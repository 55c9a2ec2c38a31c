"""
Immutable event records.

Every event is a frozen, strict pydantic model. Records are created once at
publish time and shared by reference between the hub and every subscriber
queue, so nothing downstream can mutate what another subscriber sees.

Transport Records
-----------------
`to_record()` produces the structured form handed to the subscription layer:

- Keys are camelCase field names.
- Byte fields become lowercase hexadecimal text.
- Enum fields become their values.
- Identities stay in the canonical text form supplied by the producer.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, model_validator

from chain_events.types import HexBytes, StrictBaseModel

from .catalogue import TOTAL_PRELOAD_PHASES, NodeFaultCode, PreloadPhase
from .kinds import EventKind


class Event(StrictBaseModel):
    """Base class for all published events."""

    kind: ClassVar[EventKind]
    """Channel this event type travels on."""

    def to_record(self) -> dict[str, Any]:
        """Serialize to the transport-boundary record."""
        return self.model_dump(mode="json", by_alias=True)


class TipChangedEvent(Event):
    """The chain tip moved to a new block."""

    kind: ClassVar[EventKind] = EventKind.TIP_CHANGED

    block_index: int = Field(ge=0)
    """Height of the new tip."""

    block_hash: HexBytes
    """Hash of the new tip block."""


class PreloadProgressEvent(Event):
    """
    One progress step of a preload run.

    Fields mirror the phase record: which phase is running, how many phase
    slots the run has, and how far the phase has progressed.
    """

    kind: ClassVar[EventKind] = EventKind.PRELOAD_PROGRESS

    phase_index: int = Field(ge=1, le=TOTAL_PRELOAD_PHASES)
    """Fixed phase number (1..5) of `phase_name`."""

    total_phases: int = Field(default=TOTAL_PRELOAD_PHASES)
    """Phase slots in one run. Constant within a run."""

    phase_name: PreloadPhase
    """Declared phase kind."""

    current_count: int = Field(ge=0)
    """Items processed so far in this phase."""

    total_count: int = Field(ge=0)
    """Items expected in this phase."""

    @model_validator(mode="after")
    def _check_phase_slot(self) -> PreloadProgressEvent:
        if self.phase_index != self.phase_name.phase_index:
            raise ValueError(
                f"{self.phase_name.value} occupies phase {self.phase_name.phase_index}, "
                f"not {self.phase_index}"
            )
        if self.total_phases != TOTAL_PRELOAD_PHASES:
            raise ValueError(f"total_phases must be {TOTAL_PRELOAD_PHASES}")
        return self

    def as_tuple(self) -> tuple[int, int, str, int, int]:
        """Flatten into (phase_index, total_phases, phase_name, current, total)."""
        return (
            self.phase_index,
            self.total_phases,
            self.phase_name.value,
            self.current_count,
            self.total_count,
        )


class ProtocolVersion(StrictBaseModel):
    """
    A signed application protocol version.

    Only `version_number` takes part in compatibility checks. The signer,
    signature and extra payload are carried for audit.
    """

    version_number: int
    """Version number compared against the local one."""

    signer_identity: str
    """Canonical text form of the signer address."""

    signature: HexBytes
    """Signature over the version claim."""

    extra: HexBytes | None = None
    """Optional opaque payload attached by the signer."""

    def same_version_as(self, other: ProtocolVersion) -> bool:
        """Check compatibility with another version (version number only)."""
        return self.version_number == other.version_number


class ProtocolVersionMismatchEvent(Event):
    """A peer announced a protocol version different from the local one."""

    kind: ClassVar[EventKind] = EventKind.PROTOCOL_VERSION_MISMATCH

    peer_identity: str
    """Canonical text form of the peer."""

    peer_version: ProtocolVersion
    """Version record announced by the peer, verbatim."""

    local_version: ProtocolVersion
    """Version record of this node, verbatim."""


class NodeFaultEvent(Event):
    """A fault signalled by the engine."""

    kind: ClassVar[EventKind] = EventKind.NODE_FAULT

    code: NodeFaultCode
    """Fault class."""

    message: str
    """Free-text description."""


class ActionEvaluatedEvent(Event):
    """An action finished evaluation inside a block."""

    kind: ClassVar[EventKind] = EventKind.ACTION_EVALUATED

    action_kind: str = Field(min_length=1)
    """Type name of the action. Filters match on this."""

    serialized_action: HexBytes
    """Encoded action payload."""

    block_index: int = Field(ge=0)
    """Height of the block that carried the action."""

    signer_identity: str
    """Canonical text form of the transaction signer."""
