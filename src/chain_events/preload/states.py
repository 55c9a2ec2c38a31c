"""Preload run state machine."""

from __future__ import annotations

from enum import Enum, auto


class PreloadState(Enum):
    """
    Sequencer states for a single preload run.

    State Machine Diagram
    ---------------------
    ::

        IDLE --> IN_PHASE --> IDLE
                  |    ^
                  +----+

    Transitions
    -----------
    IDLE -> IN_PHASE
        - Triggered when: The first progress callback of a run arrives
        - Action: Start a new run at that callback's phase

    IN_PHASE -> IN_PHASE
        - Triggered when: Another progress callback arrives
        - Action: Stay in the same phase or advance to a higher one

    IN_PHASE -> IDLE
        - Triggered when: The engine signals that preload ended
        - Action: Forget the phase so the next run starts from scratch

    Completion is never inferred from reaching the last phase. Only the
    engine's explicit end signal closes a run.
    """

    IDLE = auto()
    """No preload run in progress."""

    IN_PHASE = auto()
    """A run is in progress and has emitted at least one record."""

    def can_transition_to(self, target: "PreloadState") -> bool:
        """
        Check if transition to target state is valid.

        Args:
            target: The proposed target state.

        Returns:
            True if the transition is allowed by the state machine rules.
        """
        return target in _VALID_TRANSITIONS.get(self, set())

    @property
    def is_running(self) -> bool:
        """Whether a preload run is in progress."""
        return self == PreloadState.IN_PHASE


_VALID_TRANSITIONS: dict[PreloadState, set[PreloadState]] = {
    PreloadState.IDLE: {PreloadState.IN_PHASE},
    PreloadState.IN_PHASE: {PreloadState.IN_PHASE, PreloadState.IDLE},
}
"""Valid state transitions for the preload state machine."""
