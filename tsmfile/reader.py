"""Reading the index and data blocks of a TSM file."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from typing import BinaryIO

from tsmfile import boolean, integers, strings, timestamp, unsigned
from tsmfile.index import FileBlock, Footer, IndexEntry, ValueType
from tsmfile.varint import CodecError

_FOOTER_LEN = 8
_CRC_LEN = 4
_ENTRY_HEAD = struct.Struct(">8sBH")
_BLOCK_ENTRY = struct.Struct(">qqQQQ")

_SENTINEL_INFLUXDB = 0x7FF8_0000_0000_0001
_U64_MASK = (1 << 64) - 1


class ReadTsmError(Exception):
    """Raised when a TSM file cannot be read or a block cannot be decoded."""


@dataclass
class DecodedBlock:
    """Timestamps and values of one decoded block."""

    value_type: ValueType
    ts: list[int] = field(default_factory=list)
    values: list = field(default_factory=list)
    index: int = 0


class _BitReader:
    def __init__(self, data: bytes) -> None:
        self._value = int.from_bytes(data, "big")
        self._remaining = len(data) * 8

    def read(self, count: int) -> int:
        if count > self._remaining:
            raise CodecError("unexpected end of block")
        self._remaining -= count
        return (self._value >> self._remaining) & ((1 << count) - 1)


def _decode_float(src: bytes) -> list[float]:
    """Decode a Gorilla-compressed float block terminated by InfluxDB's sentinel."""
    if len(src) < 9:
        return []
    bits = int.from_bytes(src[1:9], "big")
    decoded = [bits]
    reader = _BitReader(src[9:])
    trailing, meaningful = 0, 64
    while True:
        if not reader.read(1):
            decoded.append(bits)
            continue
        if reader.read(1):
            leading = reader.read(5)
            meaningful = reader.read(6)
            if meaningful:
                trailing = (64 - leading - meaningful) & 0x3F
            else:
                trailing, meaningful = 0, 64
        bits = (bits ^ (reader.read(meaningful) << trailing)) & _U64_MASK
        if bits == _SENTINEL_INFLUXDB:
            break
        decoded.append(bits)
    return [struct.unpack(">d", b.to_bytes(8, "big"))[0] for b in decoded]


_VALUE_DECODERS = {
    ValueType.FLOAT: _decode_float,
    ValueType.INTEGER: integers.decode,
    ValueType.BOOLEAN: boolean.decode,
    ValueType.STRING: strings.decode,
    ValueType.UNSIGNED: unsigned.decode,
}


def _read_exact(file: BinaryIO, count: int, what: str) -> bytes:
    try:
        data = file.read(count)
    except (OSError, ValueError) as exc:
        raise ReadTsmError(f"read {what} err: {exc}") from exc
    if len(data) < count:
        raise ReadTsmError(f"read {what} err: unexpected end of file")
    return data


def _seek(file: BinaryIO, offset: int, whence: int, what: str) -> None:
    try:
        file.seek(offset, whence)
    except (OSError, ValueError) as exc:
        raise ReadTsmError(f"seek {what} err: {exc}") from exc


class TsmBlockReader:
    """Decodes data blocks of a TSM file opened for binary reading."""

    def __init__(self, file: BinaryIO) -> None:
        self._file = file

    def decode(self, block: FileBlock) -> DecodedBlock:
        """Read the block at ``block.offset`` and decode its timestamps and values."""
        _seek(self._file, block.offset, 0, "tsmblock")
        data = _read_exact(self._file, block.size, "tsmblock")

        # The CRC checksums in front of each section are not verified.
        ts_len = block.val_off - block.offset - _CRC_LEN
        ts_start = _CRC_LEN
        values_start = ts_start + ts_len + _CRC_LEN
        try:
            ts = timestamp.decode(data[ts_start : ts_start + ts_len])
        except CodecError as exc:
            raise ReadTsmError(str(exc)) from exc

        decoder = _VALUE_DECODERS.get(block.field_type)
        if decoder is None:
            raise ReadTsmError(
                f"cannot decode block {block.field_type!r} with no unknown value type"
            )
        try:
            values = decoder(data[values_start:])
        except CodecError as exc:
            raise ReadTsmError(str(exc)) from exc
        return DecodedBlock(value_type=block.field_type, ts=ts, values=values)


class TsmIndexReader:
    """Iterates over the index of a TSM file, one entry per block."""

    def __init__(self, file: BinaryIO, length: int) -> None:
        self._file = file
        _seek(file, -_FOOTER_LEN, 2, "footer")
        self.footer = Footer(int.from_bytes(_read_exact(file, _FOOTER_LEN, "footer"), "big"))
        _seek(file, self.footer.index_offset, 0, "index")
        self._curr_offset = self.footer.index_offset
        self._end_offset = length - _FOOTER_LEN
        self._curr: IndexEntry | None = None

    def __iter__(self) -> TsmIndexReader:
        return self

    def __next__(self) -> IndexEntry:
        if self._curr_offset == self._end_offset:
            raise StopIteration
        curr = self._curr
        if curr is not None and curr.curr_block < curr.count:
            nxt = replace(
                curr,
                block=self._next_block_entry(curr.block_type),
                curr_block=curr.curr_block + 1,
            )
        else:
            nxt = self._next_index_entry()
        self._curr = nxt
        return replace(nxt)

    def _next_index_entry(self) -> IndexEntry:
        raw = _read_exact(self._file, _ENTRY_HEAD.size, "index entry")
        self._curr_offset += _ENTRY_HEAD.size
        key, type_byte, count = _ENTRY_HEAD.unpack(raw)
        try:
            block_type = ValueType(type_byte)
        except ValueError as exc:
            raise ReadTsmError(f"unknown block type {type_byte}") from exc
        return IndexEntry(
            key=key,
            block_type=block_type,
            count=count,
            block=self._next_block_entry(block_type),
            curr_block=1,
        )

    def _next_block_entry(self, field_type: ValueType) -> FileBlock:
        raw = _read_exact(self._file, _BLOCK_ENTRY.size, "block entry")
        self._curr_offset += _BLOCK_ENTRY.size
        min_ts, max_ts, offset, size, val_off = _BLOCK_ENTRY.unpack(raw)
        return FileBlock(
            min_ts=min_ts,
            max_ts=max_ts,
            offset=offset,
            size=size,
            val_off=val_off,
            field_type=field_type,
        )