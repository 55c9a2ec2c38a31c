"""Node fault reporter."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from chain_events.events import NodeFaultCode, NodeFaultEvent
from chain_events.types import ChainEventsError

logger = logging.getLogger(__name__)

FaultPublisher = Callable[[NodeFaultCode | int, str], NodeFaultEvent]
"""Sink for fault reports: (code, message) -> published event."""


@dataclass(slots=True)
class NodeFaultReporter:
    """
    Wraps engine fault signals into coded, leveled fault events.

    Reporting never raises. An unknown code or a failed publish is logged and
    the report is dropped.
    """

    publish_fault: FaultPublisher
    """Where fault events go, usually the hub."""

    def report(self, code: NodeFaultCode | int, message: str) -> NodeFaultEvent | None:
        """
        Report a fault signal.

        Args:
            code: Fault class, from the closed set of fault codes.
            message: Free-text description.

        Returns:
            The published event, or None if the report was dropped.
        """
        try:
            event = self.publish_fault(code, message)
        except ChainEventsError as e:
            logger.warning("Dropped node fault report (code=%r): %s", code, e)
            return None

        logger.log(event.code.level, "Node fault %s: %s", event.code.name, event.message)
        return event
