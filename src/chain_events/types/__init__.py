"""Shared types: strict base models, hex byte fields, and the error taxonomy."""

from .base import CamelModel, StrictBaseModel
from .exceptions import (
    ChainEventsError,
    HubClosedError,
    PhaseRegressionError,
    ProducerError,
)
from .hex import HexBytes, to_hex

__all__ = [
    "CamelModel",
    "ChainEventsError",
    "HexBytes",
    "HubClosedError",
    "PhaseRegressionError",
    "ProducerError",
    "StrictBaseModel",
    "to_hex",
]
