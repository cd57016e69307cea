"""
Value Codec

Type-directed encoding and decoding of values against type descriptors. Containers
are wrapped in the protobuf envelope messages (List/Set/Tuple carry "items",
Dictionary carries "entries") and their elements are encoded recursively.
"""

from typing import Any, Type

from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.protobuf.message import Message

from ..errors import ArityError, DecodeError, EncodeError, UnknownTypeError
from ..proto.schema import (
    DictionaryEntry,
    DictionaryMessage,
    ListMessage,
    SetMessage,
    TupleMessage,
)
from ..remote import RemoteObject
from ..types import (
    ClassType,
    DictionaryType,
    EnumType,
    ListType,
    MessageType,
    SetType,
    TupleType,
    TypeDescriptor,
    ValueType,
)
from . import scalar


def encode_message(message: Message) -> bytes:
    """Serialize a protobuf message"""
    return message.SerializeToString()


def decode_message(data: bytes, message_class: Type[Message]) -> Message:
    """Parse a protobuf message

    Raises:
        DecodeError: The payload is not a valid message_class
    """
    try:
        return message_class.FromString(bytes(data))
    except ProtobufDecodeError as e:
        raise DecodeError(f"invalid {message_class.DESCRIPTOR.name} message: {e}") from e


def encode(value: Any, typ: TypeDescriptor) -> bytes:
    """Encode value as typ

    Raises:
        EncodeError: The value is not representable as typ (including unknown enum members)
        ArityError: A tuple value has the wrong number of elements
        UnknownTypeError: typ is not one of the type descriptor variants
    """
    if isinstance(typ, ValueType):
        return scalar.encode_value(value, typ.name)

    if isinstance(typ, EnumType):
        code = typ.code_for(value) if isinstance(value, str) else None
        if code is None:
            raise EncodeError(f"{value!r} is not a member of {typ}")
        return scalar.encode_value(code, "int32")

    if isinstance(typ, ClassType):
        if value is None:
            return scalar.encode_value(0, "uint64")
        if not isinstance(value, RemoteObject):
            raise EncodeError(f"{typ} requires a remote object, got {type(value).__name__}")
        return scalar.encode_value(value.object_id, "uint64")

    if isinstance(typ, MessageType):
        if not isinstance(value, typ.message_class):
            raise EncodeError(f"{typ} requires a {typ.message_class.__name__} message, "
                              f"got {type(value).__name__}")
        return encode_message(value)

    if isinstance(typ, (ListType, SetType)):
        _require_iterable(value, typ)
        container = ListMessage if isinstance(typ, ListType) else SetMessage
        return encode_message(container(items=[encode(item, typ.element_type) for item in value]))

    if isinstance(typ, DictionaryType):
        if not hasattr(value, "items"):
            raise EncodeError(f"{typ} requires a mapping, got {type(value).__name__}")
        entries = [
            DictionaryEntry(key=encode(key, typ.key_type), value=encode(item, typ.value_type))
            for key, item in value.items()
        ]
        return encode_message(DictionaryMessage(entries=entries))

    if isinstance(typ, TupleType):
        _require_iterable(value, typ)
        value = tuple(value)
        if len(value) != len(typ.element_types):
            raise ArityError(len(typ.element_types), len(value))
        items = [encode(item, item_type) for item, item_type in zip(value, typ.element_types)]
        return encode_message(TupleMessage(items=items))

    raise UnknownTypeError(f"cannot encode type {typ!r}")


def _require_iterable(value: Any, typ: TypeDescriptor):
    if value is None or isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        raise EncodeError(f"{typ} requires a collection, got {type(value).__name__}")


def decode(data: bytes, typ: TypeDescriptor, connection: Any = None) -> Any:
    """Decode data as typ

    Args:
        data: Wire payload
        typ: Type descriptor of the payload
        connection: Client that remote object handles are bound to

    Raises:
        DecodeError: Malformed payload or unknown enum code
        UnknownTypeError: typ is not one of the type descriptor variants
    """
    if isinstance(typ, ValueType):
        return scalar.decode_value(data, typ.name)

    if isinstance(typ, EnumType):
        code = scalar.decode_value(data, "int32")
        name = typ.name_for(code)
        if name is None:
            raise DecodeError(f"{code} is not a valid code for {typ}")
        return name

    if isinstance(typ, ClassType):
        object_id = scalar.decode_value(data, "uint64")
        if object_id == 0:
            return None
        return RemoteObject(connection, object_id, typ.class_id)

    if isinstance(typ, MessageType):
        return decode_message(data, typ.message_class)

    if isinstance(typ, ListType):
        message = decode_message(data, ListMessage)
        return [decode(item, typ.element_type, connection) for item in message.items]

    if isinstance(typ, SetType):
        message = decode_message(data, SetMessage)
        return set(decode(item, typ.element_type, connection) for item in message.items)

    if isinstance(typ, DictionaryType):
        message = decode_message(data, DictionaryMessage)
        return {
            decode(entry.key, typ.key_type, connection): decode(entry.value, typ.value_type, connection)
            for entry in message.entries
        }

    if isinstance(typ, TupleType):
        message = decode_message(data, TupleMessage)
        if len(message.items) != len(typ.element_types):
            raise DecodeError(
                f"{typ} expects {len(typ.element_types)} items, got {len(message.items)}"
            )
        return tuple(
            decode(item, item_type, connection)
            for item, item_type in zip(message.items, typ.element_types)
        )

    raise UnknownTypeError(f"cannot decode type {typ!r}")
