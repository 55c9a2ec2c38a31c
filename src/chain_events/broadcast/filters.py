"""Server-side subscription filters."""

from __future__ import annotations

from dataclasses import dataclass

from chain_events.events import ActionEvaluatedEvent


@dataclass(frozen=True, slots=True)
class ActionEvaluationFilter:
    """
    Predicate over the action kind of an evaluated action.

    Matches by exact name. Without an action kind every event is accepted.
    """

    action_kind: str | None = None
    """Action type name to keep, e.g. "Sell"."""

    def __call__(self, event: ActionEvaluatedEvent) -> bool:
        """Return True if the event should reach the subscriber."""
        return self.action_kind is None or event.action_kind == self.action_kind
