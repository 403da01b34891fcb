"""Unsigned LEB128 variable-length integers as used inside TSM blocks."""

from __future__ import annotations

MAX_VAR_INT_32 = 5
"""Maximum number of bytes a varint-encoded 32-bit integer can take."""

MAX_VAR_INT_64 = 10
"""Maximum number of bytes a varint-encoded 64-bit integer can take."""

_U64_LIMIT = 1 << 64


class CodecError(ValueError):
    """Raised when data cannot be encoded or decoded."""


def encode_uvarint(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as a varint."""
    if not 0 <= value < _U64_LIMIT:
        raise CodecError(f"value {value} does not fit in an unsigned 64-bit varint")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_uvarint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint starting at ``offset``.

    Returns the value and the offset just past the varint.
    """
    value = 0
    shift = 0
    for consumed, byte in enumerate(data[offset : offset + MAX_VAR_INT_64], start=1):
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            if value >= _U64_LIMIT:
                raise CodecError("varint overflows 64 bits")
            return value, offset + consumed
        shift += 7
    if len(data) - offset >= MAX_VAR_INT_64:
        raise CodecError("varint longer than 10 bytes")
    raise CodecError("truncated varint")