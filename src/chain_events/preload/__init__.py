"""
Preload progress sequencing.

Maps the sync engine's phase-progress callbacks onto a fixed phase catalogue
and publishes them as a monotone sequence of phase records.
"""

from __future__ import annotations

__all__ = [
    "PreloadProgressSequencer",
    "PreloadState",
    "build_record",
]

from .sequencer import PreloadProgressSequencer, build_record
from .states import PreloadState
