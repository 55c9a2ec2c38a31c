"""Exception hierarchy for the event broadcast subsystem."""

from __future__ import annotations


class ChainEventsError(Exception):
    """
    Base exception for all event broadcast errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ProducerError(ChainEventsError, ValueError):
    """
    Raised when a publish call carries malformed input.

    The event is not published. The caller receives the error synchronously.

    Attributes:
        kind: Name of the event kind being published.
        detail: What was wrong with the input.
    """

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"Rejected {kind} event: {detail}")


class PhaseRegressionError(ProducerError):
    """
    Raised when a preload callback would move the phase number backwards.

    Attributes:
        current_phase: Highest phase number already emitted in this run.
        attempted_phase: Phase number carried by the rejected callback.
    """

    def __init__(self, current_phase: int, attempted_phase: int) -> None:
        self.current_phase = current_phase
        self.attempted_phase = attempted_phase
        super().__init__(
            "preloadProgress",
            f"phase {attempted_phase} follows phase {current_phase} in the same run",
        )


class HubClosedError(ChainEventsError):
    """Raised when subscribing to a hub or channel that has been torn down."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} is closed and accepts no new subscriptions")
