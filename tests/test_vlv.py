import io

import pytest
from hypothesis import given
from hypothesis import strategies as st

from smfkit import (
    MidiEOFError,
    NumberTooBigError,
    VariableLengthInt,
    VLVTooBigError,
    decode_vlv,
    encode_vlv,
    partial_decode_vlv,
    vlv_length,
)


TEST_VALUES = [
    (b"\x00", 0),
    (b"\x40", 0x40),
    (b"\x7F", 0x7F),
    (b"\x81\x00", 0x80),
    (b"\x81\x7F", 0xFF),
    (b"\xC0\x00", 0x2000),
    (b"\xFF\x7F", 0x3FFF),
    (b"\x82\x80\x00", 0x8000),
    (b"\xFF\xFF\x7F", 0x1FFFFF),
    (b"\x81\x80\x80\x00", 0x200000),
    (b"\xC0\x80\x80\x00", 0x8000000),
    (b"\xFF\xFF\xFF\x7F", 0xFFFFFFF),
]


@pytest.mark.parametrize("data,value", TEST_VALUES)
def test_decode(data: bytes, value: int) -> None:
    infile = io.BytesIO(data + b"\x55")
    assert decode_vlv(infile) == value
    # Only the VLV itself is consumed
    assert infile.tell() == len(data)


@pytest.mark.parametrize("data,value", TEST_VALUES)
def test_encode(data: bytes, value: int) -> None:
    assert encode_vlv(value) == data
    assert VariableLengthInt.from_int(value).data == data


@pytest.mark.parametrize(
    "value,length",
    [(0, 1), (127, 1), (128, 2), (2**14 - 1, 2), (2**14, 3), (2**21 - 1, 3), (2**21, 4), (2**28 - 1, 4)],
)
def test_encoding_is_minimal(value: int, length: int) -> None:
    assert vlv_length(value) == length
    encoded = encode_vlv(value)
    assert len(encoded) == length
    assert decode_vlv(io.BytesIO(encoded)) == value


def minimal_length(value: int) -> int:
    for length in range(1, 5):
        if value < 1 << (7 * length):
            return length
    raise AssertionError(value)


@given(st.integers(min_value=0, max_value=2**28 - 1))
def test_encode_then_decode_any_value(value: int) -> None:
    encoded = encode_vlv(value)
    assert len(encoded) == vlv_length(value) == minimal_length(value)
    # Only the last byte has its continuation bit clear
    assert all(b & 0x80 for b in encoded[:-1])
    assert not encoded[-1] & 0x80
    assert decode_vlv(io.BytesIO(encoded)) == value


def test_non_minimal_encodings_are_accepted() -> None:
    assert decode_vlv(io.BytesIO(b"\x80\x00")) == 0
    assert decode_vlv(io.BytesIO(b"\x80\x80\x80\x01")) == 1
    assert decode_vlv(io.BytesIO(b"\x80\x81\x00")) == 0x80
    # ...but re-encoding is canonical
    assert VariableLengthInt.read(io.BytesIO(b"\x80\x80\x80\x01")).data == b"\x01"


def test_five_byte_chain_is_rejected() -> None:
    infile = io.BytesIO(bytes([0b1101_0010, 0b1001_0001, 0b1000_0000, 0b1110_0010, 0b0110_1001]))
    with pytest.raises(VLVTooBigError):
        decode_vlv(infile)
    # The fifth byte is never read
    assert infile.tell() == 4


def test_truncated_chain() -> None:
    with pytest.raises(MidiEOFError):
        decode_vlv(io.BytesIO(b"\x81\x80"))


def test_too_big() -> None:
    with pytest.raises(NumberTooBigError) as excinfo:
        encode_vlv(2**28)
    assert excinfo.value.value == 2**28
    with pytest.raises(NumberTooBigError):
        VariableLengthInt(2**31)


def test_negative() -> None:
    with pytest.raises(ValueError):
        encode_vlv(-1)


def test_partial_decode() -> None:
    assert partial_decode_vlv(io.BytesIO(b""), 0x05) == 5
    infile = io.BytesIO(b"\x7F\x10")
    assert partial_decode_vlv(infile, 0x81) == 0xFF
    assert infile.tell() == 1
    with pytest.raises(VLVTooBigError):
        partial_decode_vlv(io.BytesIO(b"\x80\x80\x80\x00"), 0x80)
