"""
Closed value catalogues carried by event records.

Preload Phase Catalogue
-----------------------
A preload run walks through a fixed list of phases. Each phase has a fixed
number in the range 1..5::

    1  HashDownload        fetch block hashes from peers
    2  BlockDownload       fetch block bodies
    3  BlockVerification   verify downloaded blocks
    4  (reserved)          never emitted
    5  ActionExecution     execute the actions of verified blocks

Numbers are not contiguous in the phase-name sense. Slot 4 belongs to no
declared phase, so a complete run jumps from 3 straight to 5.

Fault Codes
-----------
Fault signals from the engine use a closed set of integer codes. Each code
maps to a logging level used when the fault is reported.
"""

from __future__ import annotations

import logging
from enum import IntEnum, StrEnum
from typing import Final

TOTAL_PRELOAD_PHASES: Final[int] = 5
"""Number of phase slots in one preload run, including the reserved slot."""


class PreloadPhase(StrEnum):
    """Declared preload phase kinds."""

    HASH_DOWNLOAD = "HashDownload"
    BLOCK_DOWNLOAD = "BlockDownload"
    BLOCK_VERIFICATION = "BlockVerification"
    ACTION_EXECUTION = "ActionExecution"

    @property
    def phase_index(self) -> int:
        """Fixed phase number of this kind within a run."""
        return _PHASE_INDEX[self]


_PHASE_INDEX: dict[PreloadPhase, int] = {
    PreloadPhase.HASH_DOWNLOAD: 1,
    PreloadPhase.BLOCK_DOWNLOAD: 2,
    PreloadPhase.BLOCK_VERIFICATION: 3,
    PreloadPhase.ACTION_EXECUTION: 5,
}
"""Phase number per kind. Slot 4 is reserved."""


class NodeFaultCode(IntEnum):
    """Fault classes the engine may signal."""

    NO_ANY_PEER = 0x01
    """No peer could be reached."""

    DEMAND_TOO_HIGH = 0x02
    """Peers report a chain far ahead of the local tip."""

    TIP_NOT_CHANGE = 0x03
    """The local tip has not moved for too long."""

    MESSAGE_NOT_RECEIVED = 0x04
    """No message arrived from the network for too long."""

    ACTION_TIMEOUT = 0x05
    """Action evaluation exceeded its time budget."""

    @property
    def level(self) -> int:
        """Logging level used when this fault is reported."""
        return _FAULT_LEVEL[self]


_FAULT_LEVEL: dict[NodeFaultCode, int] = {
    NodeFaultCode.NO_ANY_PEER: logging.ERROR,
    NodeFaultCode.DEMAND_TOO_HIGH: logging.WARNING,
    NodeFaultCode.TIP_NOT_CHANGE: logging.WARNING,
    NodeFaultCode.MESSAGE_NOT_RECEIVED: logging.WARNING,
    NodeFaultCode.ACTION_TIMEOUT: logging.ERROR,
}
