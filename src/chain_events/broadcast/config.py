"""
Broadcast configuration constants.

Operational parameters for fan-out: queue sizes and replay limits.
"""

from __future__ import annotations

from typing import Final

DEFAULT_SUBSCRIPTION_BUFFER: Final[int] = 1024
"""Events a subscription may hold before the oldest is dropped."""

DEFAULT_REPLAY_LIMIT: Final[int] = 4096
"""Events a replay channel retains per session before evicting the oldest."""
