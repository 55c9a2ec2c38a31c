"""
Protocol version guard.

Decides whether a peer announcing a different application protocol version
may be accepted, and reports every such encounter to observers.

The two behaviors are independent:

- **Reporting**: On every mismatch a mismatch event carrying both full
  version records is published, whatever the verdict.
- **Policy**: The accept/reject verdict comes from a pluggable policy. The
  default rejects any mismatch without further negotiation.

Matching versions are accepted silently.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from chain_events.events import ProtocolVersion, ProtocolVersionMismatchEvent
from chain_events.types import ChainEventsError

logger = logging.getLogger(__name__)

AcceptPolicy = Callable[[ProtocolVersion, ProtocolVersion], bool]
"""Verdict for a mismatching peer: (peer_version, local_version) -> accept."""

MismatchPublisher = Callable[[str, ProtocolVersion, ProtocolVersion], ProtocolVersionMismatchEvent]
"""Sink for mismatch reports: (peer_identity, peer_version, local_version)."""


def reject_mismatch(peer_version: ProtocolVersion, local_version: ProtocolVersion) -> bool:
    """Default policy: never accept a peer on a different version."""
    return False


def accept_newer(peer_version: ProtocolVersion, local_version: ProtocolVersion) -> bool:
    """Accept peers that announce a higher version than ours."""
    return peer_version.version_number > local_version.version_number


@dataclass(slots=True)
class ProtocolVersionGuard:
    """Evaluates peer protocol versions against the local one."""

    local_version: ProtocolVersion
    """Version this node runs."""

    publish_mismatch: MismatchPublisher
    """Where mismatch reports go, usually the hub."""

    accept_policy: AcceptPolicy = field(default=reject_mismatch)
    """Verdict for mismatching peers."""

    report_mismatches: bool = field(default=True)
    """Whether mismatches are published to observers."""

    def evaluate(
        self,
        peer_version: ProtocolVersion,
        local_version: ProtocolVersion | None = None,
        *,
        peer_identity: str = "",
    ) -> bool:
        """
        Decide whether to accept a peer's protocol version.

        Args:
            peer_version: Version announced by the peer.
            local_version: Version to compare against. Defaults to `local_version`.
            peer_identity: Canonical text form of the peer, for the report.

        Returns:
            True if the peer is accepted.
        """
        local = self.local_version if local_version is None else local_version

        if peer_version.same_version_as(local):
            return True

        if self.report_mismatches:
            try:
                self.publish_mismatch(peer_identity, peer_version, local)
            except ChainEventsError as e:
                # The verdict does not depend on whether anyone heard about it.
                logger.warning("Could not report protocol mismatch with %s: %s", peer_identity, e)

        accepted = self.accept_policy(peer_version, local)
        logger.debug(
            "Peer %s on protocol version %d (local %d): %s",
            peer_identity,
            peer_version.version_number,
            local.version_number,
            "accepted" if accepted else "rejected",
        )
        return accepted
