"""
Preload progress sequencer.

The Core Problem
----------------
The sync engine reports preload progress as loose callbacks: a phase kind plus
two counters. Observers want a structured, ordered view: which phase slot of
the run is executing, out of how many, and how far it got.

How It Works
------------
- Each callback's phase kind is mapped to its fixed slot in the catalogue.
- The slot must never decrease within one run. A regression is rejected.
- Repeated callbacks for the same phase are forwarded verbatim, one record
  per callback.
- The engine closes the run explicitly with `end_run()`.

Example
-------
::

    HashDownload(0, 0)       -> (1, 5, "HashDownload", 0, 0)
    HashDownload(1, 1)       -> (1, 5, "HashDownload", 1, 1)
    BlockDownload(1, 1)      -> (2, 5, "BlockDownload", 1, 1)
    BlockVerification(1, 1)  -> (3, 5, "BlockVerification", 1, 1)
    ActionExecution(1, 1)    -> (5, 5, "ActionExecution", 1, 1)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import ValidationError

from chain_events import metrics
from chain_events.events import EventKind, PreloadPhase, PreloadProgressEvent
from chain_events.types import PhaseRegressionError, ProducerError

from .states import PreloadState

logger = logging.getLogger(__name__)

PublishFn = Callable[[PreloadProgressEvent], object]
"""Sink for emitted records, usually the preload channel's publish."""

RunStartFn = Callable[[], object]
"""Called when the first accepted callback of a run arrives."""


def build_record(
    phase: PreloadPhase | str,
    current_count: int,
    total_count: int,
) -> PreloadProgressEvent:
    """
    Validate one progress callback into its phase record.

    Raises:
        ProducerError: If the phase is unknown or the counts are malformed.
    """
    try:
        phase = PreloadPhase(phase)
        return PreloadProgressEvent(
            phase_index=phase.phase_index,
            phase_name=phase,
            current_count=current_count,
            total_count=total_count,
        )
    except (ValueError, ValidationError) as e:
        metrics.events_rejected.labels(kind=EventKind.PRELOAD_PROGRESS).inc()
        raise ProducerError(EventKind.PRELOAD_PROGRESS, str(e)) from e


@dataclass(slots=True)
class PreloadProgressSequencer:
    """Turns phase-progress callbacks into a monotone sequence of phase records."""

    publish: PublishFn
    """Where emitted records go."""

    on_run_start: RunStartFn | None = None
    """Optional hook run when a new run starts, before its first record."""

    _state: PreloadState = field(default=PreloadState.IDLE)
    """Current run state."""

    _current_phase: int = field(default=0)
    """Highest phase number emitted in the current run. 0 when idle."""

    _runs_completed: int = field(default=0)
    """Number of runs closed by `end_run()`."""

    _lock: threading.Lock = field(default_factory=threading.Lock)
    """Serializes callbacks from concurrent engine threads."""

    @property
    def state(self) -> PreloadState:
        """Current run state."""
        return self._state

    @property
    def current_phase(self) -> int:
        """Highest phase number emitted in the current run."""
        return self._current_phase

    @property
    def runs_completed(self) -> int:
        """Number of runs closed so far."""
        return self._runs_completed

    def on_progress(
        self,
        phase: PreloadPhase | str,
        current_count: int,
        total_count: int,
    ) -> PreloadProgressEvent:
        """
        Record one progress callback and publish the matching phase record.

        Args:
            phase: Phase kind reported by the engine.
            current_count: Items processed so far in the phase.
            total_count: Items expected in the phase.

        Returns:
            The published record.

        Raises:
            ProducerError: If the counts are malformed.
            PhaseRegressionError: If the phase would move backwards in this run.
        """
        record = build_record(phase, current_count, total_count)

        # Check, advance, and publish under one lock so concurrent callbacks
        # cannot interleave an older phase after a newer one.
        with self._lock:
            if record.phase_index < self._current_phase:
                metrics.events_rejected.labels(kind=EventKind.PRELOAD_PROGRESS).inc()
                raise PhaseRegressionError(self._current_phase, record.phase_index)

            if self._state is PreloadState.IDLE:
                logger.info(
                    "Preload run started at phase %d (%s)", record.phase_index, record.phase_name
                )
                if self.on_run_start is not None:
                    self.on_run_start()
            elif record.phase_index > self._current_phase:
                logger.info(
                    "Preload advanced to phase %d (%s)", record.phase_index, record.phase_name
                )

            self._transition_to(PreloadState.IN_PHASE)
            self._current_phase = record.phase_index
            metrics.preload_phase.set(record.phase_index)

            self.publish(record)

        return record

    def end_run(self) -> None:
        """Close the current run. A no-op when no run is in progress."""
        with self._lock:
            if not self._state.is_running:
                return

            self._transition_to(PreloadState.IDLE)
            logger.info("Preload run ended at phase %d", self._current_phase)
            self._current_phase = 0
            self._runs_completed += 1
            metrics.preload_phase.set(0)

    def _transition_to(self, new_state: PreloadState) -> None:
        if not self._state.can_transition_to(new_state):
            raise RuntimeError(f"Invalid preload transition: {self._state} -> {new_state}")
        self._state = new_state
