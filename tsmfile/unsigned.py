"""Encoding of unsigned 64-bit integer blocks via the signed integer codec."""

from __future__ import annotations

from collections.abc import Iterable

from tsmfile import integers
from tsmfile.varint import CodecError

_U64_LIMIT = 1 << 64
_U64_MASK = _U64_LIMIT - 1
_I64_MAX = (1 << 63) - 1


def _as_signed(value: int) -> int:
    if not 0 <= value < _U64_LIMIT:
        raise CodecError(f"value {value} does not fit in an unsigned 64-bit integer")
    return value - _U64_LIMIT if value > _I64_MAX else value


def encode(values: Iterable[int]) -> bytes:
    """Encode unsigned 64-bit integers as deltas, packed with simple8b or RLE."""
    return integers.encode(_as_signed(v) for v in values)


def decode(data: bytes) -> list[int]:
    """Decode a block into unsigned 64-bit integers."""
    if not data:
        return []
    return [v & _U64_MASK for v in integers.decode(data)]