"""
Tests for the scalar codec
"""
import struct

import pytest

from seam_rpc.codec.scalar import decode_value, decode_varint, encode_value, encode_varint
from seam_rpc.errors import DecodeError, EncodeError


class TestScalarEncoding:
    """Wire vectors of primitive values"""

    @pytest.mark.parametrize("value,name,expected", [
        (3, "int32", b"\x03"),
        (0, "int32", b"\x00"),
        (-1, "int32", b"\xff" * 9 + b"\x01"),
        (300, "uint32", b"\xac\x02"),
        (300, "int64", b"\xac\x02"),
        (True, "bool", b"\x01"),
        (False, "bool", b"\x00"),
        ("hi", "string", b"\x02hi"),
        ("", "string", b"\x00"),
        (b"\x00\x01", "bytes", b"\x02\x00\x01"),
    ])
    def test_wire_vectors(self, value, name, expected):
        """Test values encode like untagged protobuf fields"""
        assert encode_value(value, name) == expected

    def test_floating_point(self):
        """Test float and double are little-endian IEEE 754"""
        assert encode_value(0.5, "float") == struct.pack("<f", 0.5)
        assert encode_value(1.5, "double") == struct.pack("<d", 1.5)
        assert encode_value(2, "double") == struct.pack("<d", 2.0)

    def test_utf8_strings(self):
        """Test string length counts UTF-8 bytes"""
        assert encode_value("é", "string") == b"\x02\xc3\xa9"

    @pytest.mark.parametrize("value,name", [
        (1 << 31, "int32"),
        (-(1 << 31) - 1, "int32"),
        (-1, "uint32"),
        (1 << 16, "uint16"),
        (1 << 15, "int16"),
        (1 << 64, "uint64"),
    ])
    def test_out_of_range(self, value, name):
        """Test integers outside the type's range are rejected"""
        with pytest.raises(EncodeError):
            encode_value(value, name)

    @pytest.mark.parametrize("value,name", [
        (True, "int32"),
        (1.0, "int32"),
        ("1", "int32"),
        (1, "bool"),
        (b"x", "string"),
        ("x", "bytes"),
        (True, "double"),
    ])
    def test_wrong_python_type(self, value, name):
        """Test encoding checks the Python type"""
        with pytest.raises(EncodeError) as excinfo:
            encode_value(value, name)
        assert isinstance(excinfo.value, TypeError)

    def test_unknown_value_type(self):
        """Test unknown type names are rejected"""
        with pytest.raises(EncodeError):
            encode_value(1, "int8")

    def test_float_overflow(self):
        """Test single precision overflow is an encode error"""
        with pytest.raises(EncodeError):
            encode_value(1e40, "float")


class TestScalarDecoding:
    """Decoding primitive payloads"""

    @pytest.mark.parametrize("value,name", [
        (0, "int32"),
        (-5, "int32"),
        (-(1 << 63), "int64"),
        ((1 << 63) - 1, "int64"),
        ((1 << 64) - 1, "uint64"),
        (-300, "int16"),
        (65535, "uint16"),
        (True, "bool"),
        ("kerbal", "string"),
        (b"\xff\x00", "bytes"),
        (0.25, "float"),
        (-1234.5678, "double"),
    ])
    def test_decode_matches_encode(self, value, name):
        """Test decoding recovers the encoded value"""
        assert decode_value(encode_value(value, name), name) == value

    def test_decode_known_bytes(self):
        """Test decoding a known payload"""
        assert decode_value(b"\xac\x02", "uint32") == 300
        assert decode_value(b"\x02hi", "string") == "hi"

    @pytest.mark.parametrize("data,name", [
        (b"", "int32"),
        (b"\x80", "uint32"),
        (b"\x03\x00", "int32"),
        (b"\x05ab", "string"),
        (b"\x01ab", "bytes"),
        (b"\x02", "bool"),
        (b"\x00\x00", "float"),
        (b"\x00" * 9, "double"),
        (b"\x02\xff\xfe", "string"),
    ])
    def test_malformed_payloads(self, data, name):
        """Test malformed payloads raise DecodeError"""
        with pytest.raises(DecodeError):
            decode_value(data, name)

    def test_integer_out_of_range_for_type(self):
        """Test a valid varint outside the declared range is rejected"""
        with pytest.raises(DecodeError):
            decode_value(encode_value(40000, "int32"), "int16")
        with pytest.raises(DecodeError):
            decode_value(encode_value(1 << 40, "uint64"), "uint32")


class TestVarint:
    """Length prefix helpers"""

    def test_encode_varint(self):
        """Test unsigned varint length prefixes"""
        assert encode_varint(0) == b"\x00"
        assert encode_varint(127) == b"\x7f"
        assert encode_varint(300) == b"\xac\x02"

    def test_decode_varint_returns_next_position(self):
        """Test decoding reports where the next value starts"""
        assert decode_varint(b"\xac\x02\x07", 0) == (300, 2)
        assert decode_varint(b"\xac\x02\x07", 2) == (7, 3)

    def test_decode_truncated_varint(self):
        """Test a varint cut off mid-value"""
        with pytest.raises(DecodeError):
            decode_varint(b"\xac", 0)
