"""
Protobuf message/dictionary conversion helpers

Used to accept plain mappings wherever a message-typed argument is expected, and to
render envelope messages readably in debug logs.
"""

from typing import Any, Dict, Mapping, Type

from google.protobuf.json_format import MessageToDict, ParseDict
from google.protobuf.message import Message


def protobuf_to_dict(message: Message) -> Dict[str, Any]:
    """Convert a protobuf message to a dictionary

    Args:
        message: Protobuf message object

    Returns:
        Dict: Message fields keyed by their proto field names, bytes as base64
    """
    if message is None:
        return {}

    return MessageToDict(message, preserving_proto_field_name=True)


def dict_to_protobuf(data: Mapping[str, Any], message_type: Type[Message]) -> Message:
    """Build a protobuf message from a mapping of field names to values

    Args:
        data: Field values, nested messages as nested mappings
        message_type: Protobuf message class

    Returns:
        Message: New message instance

    Raises:
        google.protobuf.json_format.ParseError: A key or value does not fit the message
    """
    message = message_type()
    if not data:
        return message

    ParseDict(dict(data), message)
    return message
