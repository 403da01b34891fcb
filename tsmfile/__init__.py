"""Block codecs and a reader for TSM time-series files."""

__version__ = "0.1.0"
__all__ = [
    "boolean",
    "index",
    "integers",
    "reader",
    "simple8b",
    "strings",
    "timestamp",
    "unsigned",
    "varint",
]