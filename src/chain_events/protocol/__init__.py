"""Protocol version checks for incoming peers."""

from __future__ import annotations

__all__ = [
    "AcceptPolicy",
    "MismatchPublisher",
    "ProtocolVersionGuard",
    "accept_newer",
    "reject_mismatch",
]

from .guard import (
    AcceptPolicy,
    MismatchPublisher,
    ProtocolVersionGuard,
    accept_newer,
    reject_mismatch,
)
