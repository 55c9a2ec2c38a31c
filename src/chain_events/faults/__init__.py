"""Fault signal reporting."""

from __future__ import annotations

__all__ = [
    "FaultPublisher",
    "NodeFaultReporter",
]

from .reporter import FaultPublisher, NodeFaultReporter
