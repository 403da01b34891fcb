"""Snappy-compressed encoding of string (byte string) blocks."""

from __future__ import annotations

from collections.abc import Iterable

from tsmfile.varint import CodecError, decode_uvarint, encode_uvarint

STRING_COMPRESSED_SNAPPY = 1
"""The only string compression format, stored in the header's high nibble."""

_HEADER = bytes([STRING_COMPRESSED_SNAPPY << 4])
_MAX_I32 = (1 << 31) - 1

_MAX_BLOCK_SIZE = 1 << 16
_MAX_TABLE_SIZE = 1 << 14
_INPUT_MARGIN = 15
_MIN_NON_LITERAL_BLOCK_SIZE = 1 + 1 + _INPUT_MARGIN
_HASH_MULTIPLIER = 0x1E35A7BD
_MAX_INPUT_SIZE = (1 << 32) - 1


def _emit_literal(literal: bytes, out: bytearray) -> None:
    n = len(literal) - 1
    if n < 60:
        out.append(n << 2)
    else:
        width = (n.bit_length() + 7) // 8
        out.append((59 + width) << 2)
        out += n.to_bytes(width, "little")
    out += literal


def _emit_copy_short(offset: int, length: int, out: bytearray) -> None:
    if length <= 11 and offset <= 2047:
        out.append(1 | ((length - 4) << 2) | ((offset >> 8) << 5))
        out.append(offset & 0xFF)
    else:
        out.append(2 | ((length - 1) << 2))
        out += offset.to_bytes(2, "little")


def _emit_copy(offset: int, length: int, out: bytearray) -> None:
    while length >= 68:
        out.append(2 | (63 << 2))
        out += offset.to_bytes(2, "little")
        length -= 64
    if length > 64:
        out.append(2 | (59 << 2))
        out += offset.to_bytes(2, "little")
        length -= 60
    _emit_copy_short(offset, length, out)


def _compress_block(block: bytes, out: bytearray) -> None:
    size = len(block)
    if size < _MIN_NON_LITERAL_BLOCK_SIZE:
        _emit_literal(block, out)
        return

    table_size = 256
    while table_size < _MAX_TABLE_SIZE and table_size < size:
        table_size *= 2
    shift = 33 - table_size.bit_length()
    table = [0] * table_size

    def load(i: int) -> int:
        return int.from_bytes(block[i : i + 4], "little")

    def hash_at(i: int) -> int:
        return ((load(i) * _HASH_MULTIPLIER) & 0xFFFFFFFF) >> shift

    def match_length(s1: int, s2: int) -> int:
        matched = 0
        while s2 + matched < size and block[s1 + matched] == block[s2 + matched]:
            matched += 1
        return matched

    def emit_all() -> int:
        ip_limit = size - _INPUT_MARGIN
        next_emit = 0
        ip = 1
        next_hash = hash_at(ip)
        while True:
            skip = 32
            next_ip = ip
            while True:
                ip = next_ip
                current_hash = next_hash
                step = skip >> 5
                skip += step
                next_ip = ip + step
                if next_ip > ip_limit:
                    return next_emit
                next_hash = hash_at(next_ip)
                candidate = table[current_hash]
                table[current_hash] = ip
                if load(ip) == load(candidate):
                    break
            _emit_literal(block[next_emit:ip], out)
            while True:
                base = ip
                matched = 4 + match_length(candidate + 4, ip + 4)
                ip += matched
                _emit_copy(base - candidate, matched, out)
                next_emit = ip
                if ip >= ip_limit:
                    return next_emit
                table[hash_at(ip - 1)] = ip - 1
                current_hash = hash_at(ip)
                candidate = table[current_hash]
                table[current_hash] = ip
                if load(ip) != load(candidate):
                    break
            ip += 1
            next_hash = hash_at(ip)

    next_emit = emit_all()
    if next_emit < size:
        _emit_literal(block[next_emit:], out)


def snappy_compress(data: bytes) -> bytes:
    """Compress bytes into the raw Snappy block format."""
    data = bytes(data)
    if len(data) > _MAX_INPUT_SIZE:
        raise CodecError("source length too large")
    out = bytearray(encode_uvarint(len(data)))
    for start in range(0, len(data), _MAX_BLOCK_SIZE):
        _compress_block(data[start : start + _MAX_BLOCK_SIZE], out)
    return bytes(out)


def _take(data: bytes, pos: int, count: int) -> bytes:
    if pos + count > len(data):
        raise CodecError("snappy: corrupt input, unexpected end")
    return data[pos : pos + count]


def snappy_decompress(data: bytes) -> bytes:
    """Decompress a raw Snappy block."""
    data = bytes(data)
    try:
        expected, pos = decode_uvarint(data)
    except CodecError as exc:
        raise CodecError("snappy: invalid decompressed length") from exc
    out = bytearray()
    while pos < len(data):
        tag = data[pos]
        pos += 1
        kind = tag & 3
        if kind == 0:
            length = tag >> 2
            if length >= 60:
                width = length - 59
                length = int.from_bytes(_take(data, pos, width), "little")
                pos += width
            length += 1
            out += _take(data, pos, length)
            pos += length
        else:
            if kind == 1:
                length = 4 + ((tag >> 2) & 7)
                offset = ((tag >> 5) << 8) | _take(data, pos, 1)[0]
                pos += 1
            else:
                width = 2 if kind == 2 else 4
                length = (tag >> 2) + 1
                offset = int.from_bytes(_take(data, pos, width), "little")
                pos += width
            if offset == 0 or offset > len(out):
                raise CodecError("snappy: invalid copy offset")
            start = len(out) - offset
            if offset >= length:
                out += out[start : start + length]
            else:
                pattern = bytes(out[start:])
                out += (pattern * (length // offset + 1))[:length]
        if len(out) > expected:
            raise CodecError("snappy: output exceeds declared length")
    if len(out) != expected:
        raise CodecError("snappy: output shorter than declared length")
    return bytes(out)


def encode(values: Iterable[bytes]) -> bytes:
    """Encode byte strings as length-prefixed, Snappy-compressed data."""
    src = [bytes(v) for v in values]
    if not src:
        return b""
    payload = bytearray()
    for value in src:
        if len(value) >= _MAX_I32:
            raise CodecError("string too long")
        payload += encode_uvarint(len(value))
        payload += value
    return _HEADER + snappy_compress(payload)


def decode(data: bytes) -> list[bytes]:
    """Decode a string block into its byte strings, which need not be UTF-8."""
    if not data:
        return []
    # The header byte names the compression; Snappy is the only one.
    decoded = snappy_decompress(data[1:])
    values: list[bytes] = []
    pos = 0
    while pos < len(decoded):
        try:
            length, lower = decode_uvarint(decoded, pos)
        except CodecError as exc:
            raise CodecError("invalid encoded string length") from exc
        upper = lower + length
        if upper > len(decoded):
            raise CodecError("short buffer")
        values.append(decoded[lower:upper])
        pos = upper
    return values