# tsmfile

Block codecs and a reader for TSM (time-structured merge) files, the on-disk
format used by time-series storage engines. Pure Python, no dependencies.

## Codecs

Each codec module has `encode(values)`, which returns `bytes`, and
`decode(data)`, which returns a list. Empty input encodes to `b""` and
`b""` decodes to `[]`.

- `tsmfile.timestamp`: signed 64-bit timestamps as deltas, stored run-length
  encoded when all deltas are equal, otherwise packed with simple8b (after
  dividing out a common power of ten) or, for very large deltas, stored raw.
- `tsmfile.integers`: signed 64-bit integers as zig-zagged deltas, with the
  same run-length / simple8b / uncompressed choice. `Encoding` names the three
  forms; `zig_zag_encode` and `zig_zag_decode` are exposed too.
- `tsmfile.unsigned`: unsigned 64-bit integers through the integer codec.
- `tsmfile.boolean`: one bit per value after a header byte and a varint count.
- `tsmfile.strings`: byte strings, each length-prefixed, compressed with
  Snappy. The raw Snappy block format is available on its own as
  `snappy_compress` and `snappy_decompress`.
- `tsmfile.simple8b`: packs unsigned integers below `MAX_VALUE` (2**60 - 1)
  into 64-bit words.
- `tsmfile.varint`: `encode_uvarint` and `decode_uvarint` for unsigned LEB128
  varints.

Values that cannot be encoded and data that cannot be decoded raise
`tsmfile.varint.CodecError`, a subclass of `ValueError`.

```python
from tsmfile import integers, strings, timestamp

ts = [1_000_000_000, 2_000_000_000, 3_000_000_000]
assert timestamp.decode(timestamp.encode(ts)) == ts

vals = [12, 13, 15]
assert integers.decode(integers.encode(vals)) == vals

assert strings.decode(strings.encode([b"v1"])) == [b"v1"]
```

## Reading a file

`tsmfile.index` holds the file's structures: `ValueType`, `FileBlock` (where a
block lies and its time range), `IndexEntry` (a field's key, type, block count
and one of its blocks; `field_id()` gives the id from the key) and `Footer`.

`tsmfile.reader.TsmIndexReader(file, length)` takes a file opened in binary
mode and its length in bytes. It reads the footer (kept as its `footer`
attribute), then iterates over the index, yielding one `IndexEntry` per block.
`TsmBlockReader(file).decode(block)` reads a block and returns a
`DecodedBlock` with `value_type`, `ts` and `values`. Float blocks are decoded
from their Gorilla compression; integer, unsigned, boolean and string blocks
use the codecs above. Failures raise `ReadTsmError`.

```python
import os

from tsmfile.reader import TsmBlockReader, TsmIndexReader

with open("data.tsm", "rb") as fh:
    length = os.fstat(fh.fileno()).st_size
    blocks = [entry.block for entry in TsmIndexReader(fh, length)]
    reader = TsmBlockReader(fh)
    for block in blocks:
        decoded = reader.decode(block)
        print(decoded.ts, decoded.values)
```

## What it does not do

- It does not write TSM files: there is no block, index or footer writer.
- Floats can be decoded from a file's blocks but there is no float encoder.
- The CRC checksums in front of each block section are skipped, not verified.

## Installing

```
pip install .
```

Run the tests with `pip install .[test]` followed by `pytest`.