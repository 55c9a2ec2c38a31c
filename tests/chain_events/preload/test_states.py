"""Tests for the preload run state machine."""

from __future__ import annotations

from chain_events.preload import PreloadState


class TestPreloadStateValues:
    """Tests for PreloadState enum values."""

    def test_state_count(self) -> None:
        """Exactly two preload states exist."""
        assert len(PreloadState) == 2

    def test_only_in_phase_is_running(self) -> None:
        """Only IN_PHASE represents a run in progress."""
        assert PreloadState.IN_PHASE.is_running
        assert not PreloadState.IDLE.is_running


class TestPreloadStateTransitions:
    """Tests for state transition validation."""

    def test_idle_starts_a_run(self) -> None:
        """IDLE can transition to IN_PHASE."""
        assert PreloadState.IDLE.can_transition_to(PreloadState.IN_PHASE)

    def test_idle_cannot_transition_to_itself(self) -> None:
        """Ending a run that never started is not a transition."""
        assert not PreloadState.IDLE.can_transition_to(PreloadState.IDLE)

    def test_in_phase_can_continue(self) -> None:
        """Further callbacks keep the run in IN_PHASE."""
        assert PreloadState.IN_PHASE.can_transition_to(PreloadState.IN_PHASE)

    def test_in_phase_can_end(self) -> None:
        """The end signal returns the run to IDLE."""
        assert PreloadState.IN_PHASE.can_transition_to(PreloadState.IDLE)
