"""
Scalar Codec

Encodes primitive values the way protobuf encodes the corresponding field, minus the
field tag: varints for integers and bools, little-endian IEEE 754 for float/double,
length-prefixed bytes for strings and byte strings.
"""

import struct
from typing import Any, Tuple

# Varint routines are private to protobuf.internal; setup.py bounds the protobuf major version
from google.protobuf.internal import decoder as protobuf_decoder
from google.protobuf.internal import encoder as protobuf_encoder
from google.protobuf.message import DecodeError as ProtobufDecodeError

from ..errors import DecodeError, EncodeError
from ..types import INTEGER_RANGES, VALUE_TYPES

_FLOAT = struct.Struct("<f")
_DOUBLE = struct.Struct("<d")

SIGNED_TYPES = frozenset(("int16", "int32", "int64"))


def encode_varint(value: int) -> bytes:
    """Unsigned varint, as used for length prefixes"""
    return protobuf_encoder._VarintBytes(value)


def _encode_signed_varint(value: int) -> bytes:
    pieces = []
    protobuf_encoder._EncodeSignedVarint(pieces.append, value, True)
    return b"".join(pieces)


def decode_varint(data: bytes, pos: int = 0) -> Tuple[int, int]:
    """Decode an unsigned varint at pos

    Returns:
        Tuple: (value, position after the varint)
    """
    try:
        return protobuf_decoder._DecodeVarint(data, pos)
    except (IndexError, ProtobufDecodeError) as e:
        raise DecodeError(f"truncated or oversized varint at offset {pos}") from e


def _decode_signed_varint(data: bytes, pos: int) -> Tuple[int, int]:
    try:
        return protobuf_decoder._DecodeSignedVarint(data, pos)
    except (IndexError, ProtobufDecodeError) as e:
        raise DecodeError(f"truncated or oversized varint at offset {pos}") from e


def _length_prefixed(payload: bytes) -> bytes:
    return encode_varint(len(payload)) + payload


def encode_value(value: Any, name: str) -> bytes:
    """Encode a primitive value as the named value type

    Raises:
        EncodeError: Wrong Python type, or integer out of range for the type
    """
    if name not in VALUE_TYPES:
        raise EncodeError(f"unknown value type {name!r}")

    if name in INTEGER_RANGES:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodeError(f"{name} requires an int, got {type(value).__name__}")
        low, high = INTEGER_RANGES[name]
        if not low <= value <= high:
            raise EncodeError(f"{value} is out of range for {name}")
        if name in SIGNED_TYPES:
            return _encode_signed_varint(value)
        return encode_varint(value)

    if name in ("float", "double"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EncodeError(f"{name} requires a number, got {type(value).__name__}")
        packer = _FLOAT if name == "float" else _DOUBLE
        try:
            return packer.pack(value)
        except (OverflowError, struct.error) as e:
            raise EncodeError(f"{value} is out of range for {name}") from e

    if name == "bool":
        if not isinstance(value, bool):
            raise EncodeError(f"bool requires a bool, got {type(value).__name__}")
        return encode_varint(int(value))

    if name == "string":
        if not isinstance(value, str):
            raise EncodeError(f"string requires a str, got {type(value).__name__}")
        return _length_prefixed(value.encode("utf-8"))

    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise EncodeError(f"bytes requires a bytes-like value, got {type(value).__name__}")
    return _length_prefixed(bytes(value))


def _read_fixed(data: bytes, size: int, name: str) -> bytes:
    if len(data) != size:
        raise DecodeError(f"{name} payload must be {size} bytes, got {len(data)}")
    return data


def decode_value(data: bytes, name: str) -> Any:
    """Decode a primitive value of the named value type

    The payload must contain exactly one value.

    Raises:
        DecodeError: Truncated payload, trailing bytes, out of range integer or bad UTF-8
    """
    data = bytes(data)

    if name == "float":
        return _FLOAT.unpack(_read_fixed(data, 4, name))[0]
    if name == "double":
        return _DOUBLE.unpack(_read_fixed(data, 8, name))[0]

    if name in INTEGER_RANGES or name == "bool":
        if name in SIGNED_TYPES:
            value, pos = _decode_signed_varint(data, 0)
        else:
            value, pos = decode_varint(data, 0)
        if pos != len(data):
            raise DecodeError(f"{len(data) - pos} trailing bytes after {name}")
        if name == "bool":
            if value not in (0, 1):
                raise DecodeError(f"invalid bool value {value}")
            return bool(value)
        low, high = INTEGER_RANGES[name]
        if not low <= value <= high:
            raise DecodeError(f"{value} is out of range for {name}")
        return value

    if name in ("string", "bytes"):
        length, pos = decode_varint(data, 0)
        if pos + length != len(data):
            raise DecodeError(
                f"{name} payload declares {length} bytes but carries {len(data) - pos}"
            )
        payload = data[pos:]
        if name == "bytes":
            return payload
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"invalid UTF-8 in string: {e}") from e

    raise DecodeError(f"unknown value type {name!r}")
