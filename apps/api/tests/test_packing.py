import pytest

from rtc_token.core.errors import EncodingError, RangeError
from rtc_token.services.packing import (
    ByteReader,
    TruncatedError,
    concat,
    pack_bytes,
    pack_string,
    pack_uint16,
    pack_uint32,
)


def test_fixed_width_integers_are_little_endian():
    assert pack_uint16(0x1234) == b"\x34\x12"
    assert pack_uint16(0) == b"\x00\x00"
    assert pack_uint32(0x01020304) == b"\x04\x03\x02\x01"
    assert pack_uint32(0xFFFFFFFF) == b"\xff\xff\xff\xff"


@pytest.mark.parametrize("value", [-1, 0x10000, 1.5, True, "7"])
def test_pack_uint16_rejects_out_of_range(value):
    with pytest.raises(RangeError):
        pack_uint16(value)


@pytest.mark.parametrize("value", [-1, 0x100000000])
def test_pack_uint32_rejects_out_of_range(value):
    with pytest.raises(RangeError):
        pack_uint32(value)


def test_range_error_is_an_encoding_error():
    with pytest.raises(EncodingError):
        pack_uint32(-5)


def test_pack_string_prefixes_utf8_byte_length():
    assert pack_string("room42") == b"\x06\x00room42"
    assert pack_string("é") == b"\x02\x00\xc3\xa9"
    assert pack_string("") == b"\x00\x00"


def test_pack_string_refuses_to_truncate():
    assert len(pack_string("x" * 0xFFFF)) == 0xFFFF + 2
    with pytest.raises(EncodingError):
        pack_string("x" * 0x10000)
    with pytest.raises(EncodingError):
        pack_bytes(b"\x00" * 0x10000)


def test_concat_preserves_order():
    assert concat(b"ab", b"", b"c") == b"abc"
    assert concat() == b""


def test_reader_mirrors_packers():
    buffer = concat(pack_uint16(7), pack_uint32(123456), pack_string("héllo"), pack_bytes(b"\x01\x02"))
    reader = ByteReader(buffer)

    assert reader.read_uint16() == 7
    assert reader.read_uint32() == 123456
    assert reader.read_string() == "héllo"
    assert reader.read_bytes() == b"\x01\x02"
    assert reader.remaining == 0


def test_reader_raises_on_truncation():
    reader = ByteReader(b"\x05\x00abc")
    with pytest.raises(TruncatedError):
        reader.read_bytes()

    with pytest.raises(TruncatedError):
        ByteReader(b"\x01\x02\x03").read_uint32()


def test_reader_rejects_invalid_utf8():
    reader = ByteReader(b"\x02\x00\xff\xfe")
    with pytest.raises(EncodingError) as exc:
        reader.read_string()

    assert not isinstance(exc.value, TruncatedError)
