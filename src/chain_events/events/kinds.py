"""Event kinds published through the hub."""

from __future__ import annotations

from enum import StrEnum


class EventKind(StrEnum):
    """
    Tag identifying which channel an event travels on.

    Values double as the record names exposed to subscribers and as the
    `kind` label on every metric.
    """

    TIP_CHANGED = "tipChanged"
    """The canonical chain tip moved to a new block."""

    PRELOAD_PROGRESS = "preloadProgress"
    """A preload (initial sync) phase reported progress."""

    PROTOCOL_VERSION_MISMATCH = "protocolVersionMismatch"
    """A peer announced a protocol version different from ours."""

    NODE_FAULT = "nodeFault"
    """The engine raised a fault signal."""

    ACTION_EVALUATED = "actionEvaluated"
    """An action inside a block finished evaluation."""
