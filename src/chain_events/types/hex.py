"""Byte fields rendered as lowercase hexadecimal text at the transport boundary."""

from __future__ import annotations

from typing import Annotated

from pydantic import PlainSerializer


def to_hex(data: bytes) -> str:
    """Encode bytes as lowercase hex without a `0x` prefix."""
    return data.hex()


HexBytes = Annotated[bytes, PlainSerializer(to_hex, return_type=str, when_used="json")]
"""
Raw bytes in Python, lowercase hex text in JSON-mode dumps.

Hashes, signatures and serialized actions all use this type so that every
record produced by `to_record()` carries the same encoding.
"""
