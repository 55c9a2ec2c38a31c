"""Event kinds, value catalogues, and immutable event records."""

from .catalogue import TOTAL_PRELOAD_PHASES, NodeFaultCode, PreloadPhase
from .kinds import EventKind
from .models import (
    ActionEvaluatedEvent,
    Event,
    NodeFaultEvent,
    PreloadProgressEvent,
    ProtocolVersion,
    ProtocolVersionMismatchEvent,
    TipChangedEvent,
)

EVENT_TYPES: dict[EventKind, type[Event]] = {
    EventKind.TIP_CHANGED: TipChangedEvent,
    EventKind.PRELOAD_PROGRESS: PreloadProgressEvent,
    EventKind.PROTOCOL_VERSION_MISMATCH: ProtocolVersionMismatchEvent,
    EventKind.NODE_FAULT: NodeFaultEvent,
    EventKind.ACTION_EVALUATED: ActionEvaluatedEvent,
}
"""Record type published on each channel."""

__all__ = [
    "EVENT_TYPES",
    "TOTAL_PRELOAD_PHASES",
    "ActionEvaluatedEvent",
    "Event",
    "EventKind",
    "NodeFaultCode",
    "NodeFaultEvent",
    "PreloadPhase",
    "PreloadProgressEvent",
    "ProtocolVersion",
    "ProtocolVersionMismatchEvent",
    "TipChangedEvent",
]
