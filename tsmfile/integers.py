"""Delta, zig-zag and simple8b/RLE encoding of signed integer blocks."""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum

from tsmfile import simple8b
from tsmfile.varint import CodecError, decode_uvarint, encode_uvarint

_U64_MASK = (1 << 64) - 1
_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


class Encoding(IntEnum):
    """Encoding of an integer block, stored in the header's high nibble."""

    UNCOMPRESSED = 0
    SIMPLE8B = 1
    RLE = 2


def _to_i64(value: int) -> int:
    value &= _U64_MASK
    return value - (1 << 64) if value > _I64_MAX else value


def zig_zag_encode(value: int) -> int:
    """Map a signed 64-bit integer onto an unsigned one: 0, -1, 1, -2 -> 0, 1, 2, 3."""
    return ((value << 1) ^ (value >> 63)) & _U64_MASK


def zig_zag_decode(value: int) -> int:
    """Reverse zig_zag_encode."""
    return (value >> 1) ^ -(value & 1)


def encode(values: Iterable[int]) -> bytes:
    """Encode signed 64-bit integers as zig-zagged deltas."""
    src = list(values)
    if not src:
        return b""
    if any(not _I64_MIN <= v <= _I64_MAX for v in src):
        raise CodecError("value does not fit in a signed 64-bit integer")

    deltas = [zig_zag_encode(src[0])]
    deltas += [zig_zag_encode(_to_i64(cur - prev)) for prev, cur in zip(src, src[1:])]
    largest = max(deltas[1:], default=0)

    if len(deltas) > 2 and all(d == deltas[1] for d in deltas[2:]):
        return (
            bytes([Encoding.RLE << 4])
            + deltas[0].to_bytes(8, "big")
            + encode_uvarint(deltas[1])
            + encode_uvarint(len(deltas) - 1)
        )

    if largest > simple8b.MAX_VALUE:
        return bytes([Encoding.UNCOMPRESSED << 4]) + b"".join(
            d.to_bytes(8, "big") for d in deltas
        )

    return (
        bytes([Encoding.SIMPLE8B << 4])
        + deltas[0].to_bytes(8, "big")
        + simple8b.encode(deltas[1:])
    )


def _decode_uncompressed(src: bytes) -> list[int]:
    if not src or len(src) % 8:
        raise CodecError("invalid uncompressed block length")
    out = []
    prev = 0
    for start in range(0, len(src), 8):
        prev = _to_i64(prev + zig_zag_decode(int.from_bytes(src[start : start + 8], "big")))
        out.append(prev)
    return out


def _decode_rle(src: bytes) -> list[int]:
    if len(src) < 8:
        raise CodecError("not enough data to decode using RLE")
    try:
        delta, pos = decode_uvarint(src, 8)
    except CodecError as exc:
        raise CodecError("unable to decode delta") from exc
    try:
        count, _ = decode_uvarint(src, pos)
    except CodecError as exc:
        raise CodecError("unable to decode count") from exc
    current = zig_zag_decode(int.from_bytes(src[:8], "big"))
    step = zig_zag_decode(delta)
    out = [current]
    for _ in range(count):
        current = _to_i64(current + step)
        out.append(current)
    return out


def _decode_simple8b(src: bytes) -> list[int]:
    if len(src) < 8:
        raise CodecError("not enough data to decode packed integer.")
    current = zig_zag_decode(int.from_bytes(src[:8], "big"))
    out = [current]
    for packed in simple8b.decode(src[8:]):
        current = _to_i64(current + zig_zag_decode(packed))
        out.append(current)
    return out


def decode(data: bytes) -> list[int]:
    """Decode an integer block into signed 64-bit integers."""
    if not data:
        return []
    encoding = data[0] >> 4
    payload = data[1:]
    if encoding == Encoding.UNCOMPRESSED:
        return _decode_uncompressed(payload)
    if encoding == Encoding.RLE:
        return _decode_rle(payload)
    if encoding == Encoding.SIMPLE8B:
        return _decode_simple8b(payload)
    raise CodecError("invalid block encoding")