"""
Hub configuration.

Settings can be given explicitly or read from the environment:

- `CHAIN_EVENTS_SUBSCRIPTION_BUFFER`: queue capacity per subscription.
- `CHAIN_EVENTS_REPLAY_LIMIT`: events retained per replay session (0 = unbounded).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from chain_events.broadcast.config import DEFAULT_REPLAY_LIMIT, DEFAULT_SUBSCRIPTION_BUFFER

SUBSCRIPTION_BUFFER_ENV = "CHAIN_EVENTS_SUBSCRIPTION_BUFFER"
"""Environment variable overriding the subscription buffer."""

REPLAY_LIMIT_ENV = "CHAIN_EVENTS_REPLAY_LIMIT"
"""Environment variable overriding the replay limit."""


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid {name} environment variable: {raw!r} is not an integer"
        ) from None


@dataclass(frozen=True, slots=True)
class HubConfig:
    """Configuration for an event broadcast hub."""

    subscription_buffer: int = field(default=DEFAULT_SUBSCRIPTION_BUFFER)
    """Events a subscription may hold before the oldest is dropped."""

    replay_limit: int | None = field(default=DEFAULT_REPLAY_LIMIT)
    """Action evaluations retained per session. None keeps them all."""

    def __post_init__(self) -> None:
        if self.subscription_buffer < 1:
            raise ValueError(
                f"subscription_buffer must be positive, got {self.subscription_buffer}"
            )
        if self.replay_limit is not None and self.replay_limit < 1:
            raise ValueError(f"replay_limit must be positive or None, got {self.replay_limit}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HubConfig:
        """
        Build a configuration from environment variables.

        Unset variables fall back to the defaults.

        Raises:
            ValueError: If a variable is set to an invalid value.
        """
        env = os.environ if environ is None else environ

        replay_limit: int | None = _read_int(env, REPLAY_LIMIT_ENV, DEFAULT_REPLAY_LIMIT)
        if replay_limit == 0:
            replay_limit = None

        return cls(
            subscription_buffer=_read_int(
                env, SUBSCRIPTION_BUFFER_ENV, DEFAULT_SUBSCRIPTION_BUFFER
            ),
            replay_limit=replay_limit,
        )
