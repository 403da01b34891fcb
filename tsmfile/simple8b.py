"""Simple8b packing of unsigned integers into 64-bit words."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import takewhile

from tsmfile.varint import CodecError

_SELECTOR_SHIFT = 60

MAX_VALUE = (1 << 60) - 1
"""Largest value that can be packed."""

# (values per word, bits per value) for selectors 2 through 15.
_NUM_BITS = (
    (60, 1),
    (30, 2),
    (20, 3),
    (15, 4),
    (12, 5),
    (10, 6),
    (8, 7),
    (7, 8),
    (6, 10),
    (5, 12),
    (4, 15),
    (3, 20),
    (2, 30),
    (1, 60),
)
_FIRST_PACKED_SELECTOR = 2

_WORD_240_ONES = bytes(8)
_WORD_120_ONES = (1 << _SELECTOR_SHIFT).to_bytes(8, "big")


def _pack_word(src: list[int], start: int) -> tuple[int, int]:
    remain = len(src) - start
    for selector, (count, bits) in enumerate(_NUM_BITS, start=_FIRST_PACKED_SELECTOR):
        if count > remain:
            continue
        limit = 1 << bits
        chunk = src[start : start + count]
        if any(not 0 <= v < limit for v in chunk):
            continue
        word = selector << _SELECTOR_SHIFT
        for k, v in enumerate(chunk):
            word |= v << (k * bits)
        return word, count
    raise CodecError("value out of bounds")


def encode(values: Iterable[int]) -> bytes:
    """Pack unsigned integers, each below 2**60, into simple8b words."""
    src = list(values)
    out = bytearray()
    i = 0
    while i < len(src):
        remain = len(src) - i
        if remain >= 120:
            window = src[i : i + (240 if remain >= 240 else 120)]
            run = sum(1 for _ in takewhile(lambda v: v == 1, window))
            if run == 240:
                out += _WORD_240_ONES
                i += 240
                continue
            if run >= 120:
                out += _WORD_120_ONES
                i += 120
                continue
        word, taken = _pack_word(src, i)
        out += word.to_bytes(8, "big")
        i += taken
    return bytes(out)


def _unpack_word(word: int) -> list[int]:
    selector = word >> _SELECTOR_SHIFT
    if selector == 0:
        return [1] * 240
    if selector == 1:
        return [1] * 120
    count, bits = _NUM_BITS[selector - _FIRST_PACKED_SELECTOR]
    mask = (1 << bits) - 1
    return [(word >> (k * bits)) & mask for k in range(count)]


def decode(data: bytes) -> list[int]:
    """Unpack simple8b words into the integers they hold."""
    if len(data) % 8:
        raise CodecError("simple8b data is not a whole number of words")
    values: list[int] = []
    for start in range(0, len(data), 8):
        values.extend(_unpack_word(int.from_bytes(data[start : start + 8], "big")))
    return values