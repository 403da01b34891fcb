"""Bit-packed encoding of boolean blocks."""

from __future__ import annotations

from collections.abc import Iterable

from tsmfile.varint import CodecError, decode_uvarint, encode_uvarint

BOOLEAN_COMPRESSED_BIT_PACKED = 1
"""The only boolean compression format, stored in the header's high nibble."""

_HEADER = BOOLEAN_COMPRESSED_BIT_PACKED << 4


def encode(values: Iterable[bool]) -> bytes:
    """Encode booleans as header, varint count and one bit per value."""
    src = list(values)
    if not src:
        return b""
    packed = bytearray((len(src) + 7) // 8)
    for i, value in enumerate(src):
        if value:
            packed[i >> 3] |= 0x80 >> (i & 7)
    return bytes([_HEADER]) + encode_uvarint(len(src)) + bytes(packed)


def decode(data: bytes) -> list[bool]:
    """Decode a bit-packed boolean block."""
    if not data:
        return []
    if data[0] != _HEADER:
        raise CodecError(f"unknown boolean encoding {data[0]:#x}")
    try:
        count, pos = decode_uvarint(data, 1)
    except CodecError as exc:
        raise CodecError("boolean decoder: invalid count") from exc
    payload = data[pos:]
    # A truncated block yields only the values actually present.
    count = min(count, len(payload) * 8)
    return [bool(payload[i >> 3] & (0x80 >> (i & 7))) for i in range(count)]