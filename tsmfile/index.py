"""Index entries, block descriptors and footer of a TSM file."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

MAX_BLOCK_VALUES = 1000
"""Maximum number of values a single TSM block can store."""


class ValueType(IntEnum):
    """Type of the values stored in a block, as written in the index."""

    FLOAT = 0
    INTEGER = 1
    BOOLEAN = 2
    STRING = 3
    UNSIGNED = 4
    UNKNOWN = 5


@dataclass
class FileBlock:
    """Location and time range of one block inside a TSM file."""

    min_ts: int = 0
    max_ts: int = 0
    offset: int = 0
    size: int = 0
    val_off: int = 0
    field_type: ValueType = ValueType.UNKNOWN
    reader_idx: int = 0


@dataclass
class IndexEntry:
    """One block entry of a field in the index, with the field's header data."""

    key: bytes
    block_type: ValueType
    count: int
    block: FileBlock = field(default_factory=FileBlock)
    curr_block: int = 1

    def field_id(self) -> int:
        """The field id held big-endian in the first eight bytes of the key."""
        if len(self.key) < 8:
            raise ValueError("index key is shorter than eight bytes")
        return int.from_bytes(self.key[:8], "big")


@dataclass(frozen=True)
class Footer:
    """The trailing eight bytes of a TSM file: where the index starts."""

    index_offset: int