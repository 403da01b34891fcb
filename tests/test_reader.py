import io
import struct
import zlib

import pytest

from tsmfile import boolean, integers, strings, timestamp, unsigned
from tsmfile.index import FileBlock, ValueType
from tsmfile.reader import DecodedBlock, ReadTsmError, TsmBlockReader, TsmIndexReader

_MAGIC = 0x1346613
_VERSION = 1

# A float block compressed with InfluxDB's gorilla encoder holding 507 zeros.
_INFLUX_FLOAT_ZEROS = bytes(
    [16] + [0] * 71 + [48, 255, 255, 224, 0, 0, 0, 0, 0, 4]
)


def _block(ts, val_buf):
    return timestamp.encode(ts), val_buf, min(ts), max(ts)


def _tsm_file(entries):
    out = bytearray(_MAGIC.to_bytes(4, "big") + bytes([_VERSION]))
    index = bytearray()
    for field_id, vtype, blocks in entries:
        index += field_id.to_bytes(8, "big") + bytes([vtype]) + len(blocks).to_bytes(2, "big")
        for ts_buf, val_buf, min_ts, max_ts in blocks:
            offset = len(out)
            out += zlib.crc32(ts_buf).to_bytes(4, "big") + ts_buf
            val_off = len(out)
            out += zlib.crc32(val_buf).to_bytes(4, "big") + val_buf
            size = len(ts_buf) + len(val_buf) + 8
            index += struct.pack(">qqQQQ", min_ts, max_ts, offset, size, val_off)
    index_offset = len(out)
    out += index + index_offset.to_bytes(8, "big")
    return bytes(out)


def _entries(data):
    return list(TsmIndexReader(io.BytesIO(data), len(data)))


def _decode_all(data):
    cursor = io.BytesIO(data)
    entries = list(TsmIndexReader(cursor, len(data)))
    reader = TsmBlockReader(cursor)
    return [reader.decode(entry.block) for entry in entries]


def test_tsm_reader_unsigned_block():
    data = _tsm_file(
        [(1, ValueType.UNSIGNED, [_block([2, 3, 4], unsigned.encode([12, 13, 15]))])]
    )
    entries = _entries(data)
    assert [e.field_id() for e in entries] == [1]
    ori = DecodedBlock(value_type=ValueType.UNSIGNED, ts=[2, 3, 4], values=[12, 13, 15])
    assert _decode_all(data) == [ori]


def test_index_yields_one_entry_per_block():
    data = _tsm_file(
        [
            (
                7,
                ValueType.INTEGER,
                [
                    _block([1, 2], integers.encode([-5, 9])),
                    _block([3, 10], integers.encode([100, -100])),
                ],
            ),
            (8, ValueType.BOOLEAN, [_block([4, 5, 6], boolean.encode([True, False, True]))]),
        ]
    )
    entries = _entries(data)
    assert [(e.field_id(), e.curr_block, e.count) for e in entries] == [
        (7, 1, 2),
        (7, 2, 2),
        (8, 1, 1),
    ]
    assert [(e.block.min_ts, e.block.max_ts) for e in entries] == [(1, 2), (3, 10), (4, 6)]
    assert all(e.block.field_type is e.block_type for e in entries)
    assert _decode_all(data) == [
        DecodedBlock(ValueType.INTEGER, [1, 2], [-5, 9]),
        DecodedBlock(ValueType.INTEGER, [3, 10], [100, -100]),
        DecodedBlock(ValueType.BOOLEAN, [4, 5, 6], [True, False, True]),
    ]


def test_block_offsets_follow_header():
    data = _tsm_file(
        [(1, ValueType.UNSIGNED, [_block([2, 3, 4], unsigned.encode([12, 13, 15]))])]
    )
    (entry,) = _entries(data)
    assert entry.block.offset == 5
    assert entry.block.val_off > entry.block.offset
    assert entry.block.offset + entry.block.size <= len(data) - 8


def test_string_block_decodes():
    values = [b"v1", "\u2603".encode(), b"\xc0"]
    data = _tsm_file([(3, ValueType.STRING, [_block([10, 20, 30], strings.encode(values))])])
    assert _decode_all(data) == [DecodedBlock(ValueType.STRING, [10, 20, 30], values)]


def test_float_block_from_influxdb_decodes():
    ts = list(range(507))
    data = _tsm_file([(4, ValueType.FLOAT, [_block(ts, _INFLUX_FLOAT_ZEROS)])])
    (decoded,) = _decode_all(data)
    assert decoded.ts == ts
    assert decoded.values == [0.0] * 507


def test_unknown_value_type_cannot_be_decoded():
    data = _tsm_file([(5, ValueType.UNKNOWN, [_block([1, 2, 3], b"\x00")])])
    cursor = io.BytesIO(data)
    (entry,) = list(TsmIndexReader(cursor, len(data)))
    with pytest.raises(ReadTsmError):
        TsmBlockReader(cursor).decode(entry.block)


def test_truncated_block_raises():
    data = _tsm_file(
        [(1, ValueType.UNSIGNED, [_block([2, 3, 4], unsigned.encode([12, 13, 15]))])]
    )
    cursor = io.BytesIO(data)
    block = FileBlock(
        offset=len(data) - 4, size=64, val_off=len(data), field_type=ValueType.UNSIGNED
    )
    with pytest.raises(ReadTsmError):
        TsmBlockReader(cursor).decode(block)


def test_corrupt_value_block_raises():
    data = _tsm_file([(1, ValueType.INTEGER, [_block([1, 2, 3], b"\xf0\x00")])])
    with pytest.raises(ReadTsmError):
        _decode_all(data)


def test_unknown_type_byte_in_index_raises():
    data = bytearray(_tsm_file([(1, ValueType.UNSIGNED, [_block([1], unsigned.encode([1]))])]))
    index_offset = int.from_bytes(data[-8:], "big")
    data[index_offset + 8] = 200
    with pytest.raises(ReadTsmError):
        _entries(bytes(data))


def test_empty_index_yields_nothing():
    data = _tsm_file([])
    reader = TsmIndexReader(io.BytesIO(data), len(data))
    assert reader.footer.index_offset == 5
    assert list(reader) == []


def test_file_shorter_than_footer_raises():
    with pytest.raises(ReadTsmError):
        TsmIndexReader(io.BytesIO(b"\x00\x01"), 2)


def test_truncated_index_raises():
    data = _tsm_file([(1, ValueType.UNSIGNED, [_block([1, 2], unsigned.encode([1, 2]))])])
    index_offset = int.from_bytes(data[-8:], "big")
    truncated = data[: index_offset + 20] + index_offset.to_bytes(8, "big")
    with pytest.raises(ReadTsmError):
        _entries(truncated)