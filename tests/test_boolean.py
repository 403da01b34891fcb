import pytest

from tsmfile.boolean import decode, encode
from tsmfile.varint import CodecError


def test_encode_no_values():
    assert encode([]) == b""


def test_encode_single_true():
    assert encode([True]) == bytes([16, 1, 128])


def test_encode_single_false():
    assert encode([False]) == bytes([16, 1, 0])


def test_encode_multi_compressed():
    src = [i % 2 == 0 for i in range(10)]
    assert encode(src) == bytes([16, 10, 170, 128])


def test_decode_no_values():
    assert decode(b"") == []


def test_decode_single_true():
    assert decode(bytes([16, 1, 128])) == [True]


def test_decode_single_false():
    assert decode(bytes([16, 1, 0])) == [False]


def test_decode_multi_compressed():
    expected = [i % 2 == 0 for i in range(10)]
    assert decode(bytes([16, 10, 170, 128])) == expected


@pytest.mark.parametrize("size", [1, 7, 8, 9, 127, 128, 1000])
def test_round_trip(size):
    src = [(i * 7) % 3 == 0 for i in range(size)]
    assert decode(encode(src)) == src


def test_truncated_block_limits_count():
    decoded = decode(bytes([16, 20, 0xFF]))
    assert decoded == [True] * 8


def test_bad_header():
    with pytest.raises(CodecError):
        decode(bytes([32, 1, 128]))


def test_invalid_count():
    with pytest.raises(CodecError, match="invalid count"):
        decode(bytes([16, 0x80]))