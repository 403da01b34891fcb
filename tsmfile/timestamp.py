"""Delta encoding of timestamp blocks with decimal scaling, simple8b or RLE."""

from __future__ import annotations

from collections.abc import Iterable

from tsmfile import simple8b
from tsmfile.integers import Encoding
from tsmfile.varint import CodecError, decode_uvarint, encode_uvarint

_U64_MASK = (1 << 64) - 1
_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_MAX_SCALE_EXPONENT = 12


def _to_i64(value: int) -> int:
    value &= _U64_MASK
    return value - (1 << 64) if value > _I64_MAX else value


def _scale_exponent(value: int) -> int:
    """Largest exponent e <= 12 such that 10**e divides value."""
    exponent = _MAX_SCALE_EXPONENT
    while exponent > 0 and value % 10**exponent:
        exponent -= 1
    return exponent


def _encode_rle(first: int, delta: int, count: int) -> bytes:
    exponent = _scale_exponent(delta)
    header = (Encoding.RLE << 4) | exponent
    return (
        bytes([header])
        + first.to_bytes(8, "big")
        + encode_uvarint(delta // 10**exponent)
        + encode_uvarint(count)
    )


def encode(values: Iterable[int]) -> bytes:
    """Encode signed 64-bit timestamps, ideally sorted ascending."""
    src = list(values)
    if not src:
        return b""
    if any(not _I64_MIN <= v <= _I64_MAX for v in src):
        raise CodecError("timestamp does not fit in a signed 64-bit integer")

    raw = [v & _U64_MASK for v in src]
    deltas = [raw[0]] + [(cur - prev) & _U64_MASK for prev, cur in zip(raw, raw[1:])]
    largest = max(deltas[1:], default=0)

    if len(deltas) > 1 and all(d == deltas[1] for d in deltas[2:]):
        return _encode_rle(deltas[0], deltas[1], len(deltas))

    if largest > simple8b.MAX_VALUE:
        return bytes([Encoding.UNCOMPRESSED << 4]) + b"".join(
            d.to_bytes(8, "big") for d in deltas
        )

    exponent = min((_scale_exponent(d) for d in deltas[1:]), default=_MAX_SCALE_EXPONENT)
    packed = deltas[1:]
    if exponent:
        divisor = 10**exponent
        packed = [d // divisor for d in packed]
    header = (Encoding.SIMPLE8B << 4) | exponent
    return bytes([header]) + deltas[0].to_bytes(8, "big") + simple8b.encode(packed)


def _decode_uncompressed(src: bytes) -> list[int]:
    if not src or len(src) % 8:
        raise CodecError("invalid uncompressed block length")
    out = []
    prev = 0
    for start in range(0, len(src), 8):
        prev = _to_i64(prev + int.from_bytes(src[start : start + 8], "big", signed=True))
        out.append(prev)
    return out


def _decode_rle(src: bytes) -> list[int]:
    if len(src) < 9:
        raise CodecError("not enough data to decode using RLE")
    scaler = 10 ** (src[0] & 0x0F)
    current = int.from_bytes(src[1:9], "big", signed=True)
    try:
        delta, pos = decode_uvarint(src, 9)
    except CodecError as exc:
        raise CodecError("unable to decode delta") from exc
    try:
        count, _ = decode_uvarint(src, pos)
    except CodecError as exc:
        raise CodecError("unable to decode count") from exc
    step = _to_i64(delta * scaler)
    out = []
    for _ in range(count):
        out.append(current)
        current = _to_i64(current + step)
    return out


def _decode_simple8b(src: bytes) -> list[int]:
    if len(src) < 9:
        raise CodecError("not enough data to decode packed timestamp")
    scaler = 10 ** (src[0] & 0x0F)
    current = int.from_bytes(src[1:9], "big", signed=True)
    out = [current]
    for packed in simple8b.decode(src[9:]):
        current = _to_i64(current + packed * scaler)
        out.append(current)
    return out


def decode(data: bytes) -> list[int]:
    """Decode a timestamp block into signed 64-bit integers."""
    if not data:
        return []
    encoding = data[0] >> 4
    if encoding == Encoding.UNCOMPRESSED:
        return _decode_uncompressed(data[1:])
    if encoding == Encoding.RLE:
        return _decode_rle(data)
    if encoding == Encoding.SIMPLE8B:
        return _decode_simple8b(data)
    raise CodecError("invalid block encoding")