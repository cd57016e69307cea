"""
Value codec: type-directed binary encoding of call arguments and return values

- scalar: primitive value types
- values: all type descriptor variants, recursively
"""

from .scalar import decode_value, decode_varint, encode_value, encode_varint
from .values import decode, decode_message, encode, encode_message

__all__ = [
    "encode",
    "decode",
    "encode_message",
    "decode_message",
    "encode_value",
    "decode_value",
    "encode_varint",
    "decode_varint",
]
