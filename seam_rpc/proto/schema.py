"""
Envelope Message Schema

Builds the protobuf message classes exchanged with the server (request/response
envelope, the container wrappers used by the value codec, and the service manifest).

The descriptors are assembled from a FileDescriptorProto at import time and added
to a private descriptor pool, so no protoc step is needed and the classes never
clash with other definitions in the default pool.
"""

from typing import Dict, List, Tuple, Type

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message

PACKAGE = "krpc.schema"

# Schema ids are the names the server uses for these messages in type strings
SCHEMA_NAMESPACE = "KRPC"

_F = descriptor_pb2.FieldDescriptorProto

_OPTIONAL = _F.LABEL_OPTIONAL
_REPEATED = _F.LABEL_REPEATED

# message name -> [(field name, number, type, label, message type name)]
MESSAGE_FIELDS: List[Tuple[str, List[tuple]]] = [
    ("Argument", [
        ("position", 1, _F.TYPE_UINT32, _OPTIONAL, None),
        ("value", 2, _F.TYPE_BYTES, _OPTIONAL, None),
    ]),
    ("Request", [
        ("service", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("procedure", 2, _F.TYPE_STRING, _OPTIONAL, None),
        ("arguments", 3, _F.TYPE_MESSAGE, _REPEATED, "Argument"),
    ]),
    ("Response", [
        ("time", 1, _F.TYPE_DOUBLE, _OPTIONAL, None),
        ("has_error", 2, _F.TYPE_BOOL, _OPTIONAL, None),
        ("error", 3, _F.TYPE_STRING, _OPTIONAL, None),
        ("has_return_value", 4, _F.TYPE_BOOL, _OPTIONAL, None),
        ("return_value", 5, _F.TYPE_BYTES, _OPTIONAL, None),
    ]),
    ("List", [
        ("items", 1, _F.TYPE_BYTES, _REPEATED, None),
    ]),
    ("Set", [
        ("items", 1, _F.TYPE_BYTES, _REPEATED, None),
    ]),
    ("Tuple", [
        ("items", 1, _F.TYPE_BYTES, _REPEATED, None),
    ]),
    ("DictionaryEntry", [
        ("key", 1, _F.TYPE_BYTES, _OPTIONAL, None),
        ("value", 2, _F.TYPE_BYTES, _OPTIONAL, None),
    ]),
    ("Dictionary", [
        ("entries", 1, _F.TYPE_MESSAGE, _REPEATED, "DictionaryEntry"),
    ]),
    ("Parameter", [
        ("name", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("type", 2, _F.TYPE_STRING, _OPTIONAL, None),
        ("has_default_value", 3, _F.TYPE_BOOL, _OPTIONAL, None),
        ("default_value", 4, _F.TYPE_BYTES, _OPTIONAL, None),
    ]),
    ("Procedure", [
        ("name", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("parameters", 2, _F.TYPE_MESSAGE, _REPEATED, "Parameter"),
        ("has_return_type", 3, _F.TYPE_BOOL, _OPTIONAL, None),
        ("return_type", 4, _F.TYPE_STRING, _OPTIONAL, None),
        ("attributes", 5, _F.TYPE_STRING, _REPEATED, None),
        ("documentation", 6, _F.TYPE_STRING, _OPTIONAL, None),
    ]),
    ("Class", [
        ("name", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("documentation", 2, _F.TYPE_STRING, _OPTIONAL, None),
    ]),
    ("EnumerationValue", [
        ("name", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("value", 2, _F.TYPE_INT32, _OPTIONAL, None),
        ("documentation", 3, _F.TYPE_STRING, _OPTIONAL, None),
    ]),
    ("Enumeration", [
        ("name", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("values", 2, _F.TYPE_MESSAGE, _REPEATED, "EnumerationValue"),
        ("documentation", 3, _F.TYPE_STRING, _OPTIONAL, None),
    ]),
    ("Service", [
        ("name", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("procedures", 2, _F.TYPE_MESSAGE, _REPEATED, "Procedure"),
        ("classes", 3, _F.TYPE_MESSAGE, _REPEATED, "Class"),
        ("enumerations", 4, _F.TYPE_MESSAGE, _REPEATED, "Enumeration"),
        ("documentation", 5, _F.TYPE_STRING, _OPTIONAL, None),
    ]),
    ("Services", [
        ("services", 1, _F.TYPE_MESSAGE, _REPEATED, "Service"),
    ]),
    # Returned by the core service's AddStream and GetStatus
    ("Stream", [
        ("id", 1, _F.TYPE_UINT32, _OPTIONAL, None),
    ]),
    ("Status", [
        ("version", 1, _F.TYPE_STRING, _OPTIONAL, None),
        ("bytes_read", 2, _F.TYPE_UINT64, _OPTIONAL, None),
        ("bytes_written", 3, _F.TYPE_UINT64, _OPTIONAL, None),
        ("bytes_read_rate", 4, _F.TYPE_FLOAT, _OPTIONAL, None),
        ("bytes_written_rate", 5, _F.TYPE_FLOAT, _OPTIONAL, None),
        ("rpcs_executed", 6, _F.TYPE_UINT64, _OPTIONAL, None),
        ("rpc_rate", 7, _F.TYPE_FLOAT, _OPTIONAL, None),
        ("one_rpc_per_update", 8, _F.TYPE_BOOL, _OPTIONAL, None),
        ("max_time_per_update", 9, _F.TYPE_UINT32, _OPTIONAL, None),
        ("adaptive_rate_control", 10, _F.TYPE_BOOL, _OPTIONAL, None),
        ("blocking_recv", 11, _F.TYPE_BOOL, _OPTIONAL, None),
        ("recv_timeout", 12, _F.TYPE_UINT32, _OPTIONAL, None),
        ("time_per_rpc_update", 13, _F.TYPE_FLOAT, _OPTIONAL, None),
        ("poll_time_per_rpc_update", 14, _F.TYPE_FLOAT, _OPTIONAL, None),
        ("exec_time_per_rpc_update", 15, _F.TYPE_FLOAT, _OPTIONAL, None),
        ("stream_rpcs", 16, _F.TYPE_UINT32, _OPTIONAL, None),
        ("stream_rpcs_executed", 17, _F.TYPE_UINT64, _OPTIONAL, None),
        ("stream_rpc_rate", 18, _F.TYPE_FLOAT, _OPTIONAL, None),
        ("time_per_stream_update", 19, _F.TYPE_FLOAT, _OPTIONAL, None),
    ]),
]


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Assemble the FileDescriptorProto for all envelope messages"""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="seam_rpc/krpc_schema.proto",
        package=PACKAGE,
        syntax="proto3",
    )
    for message_name, fields in MESSAGE_FIELDS:
        message_proto = file_proto.message_type.add(name=message_name)
        for field_name, number, field_type, label, type_name in fields:
            field_proto = message_proto.field.add(
                name=field_name,
                number=number,
                type=field_type,
                label=label,
            )
            if type_name:
                field_proto.type_name = f".{PACKAGE}.{type_name}"
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())

MESSAGE_CLASSES: Dict[str, Type[Message]] = {
    message_name: message_factory.GetMessageClass(
        _pool.FindMessageTypeByName(f"{PACKAGE}.{message_name}")
    )
    for message_name, _ in MESSAGE_FIELDS
}


def message_class(name: str) -> Type[Message]:
    """Get an envelope message class by its short name, e.g. "Request"

    Raises:
        KeyError: No envelope message with that name
    """
    return MESSAGE_CLASSES[name]


def schema_ids() -> Dict[str, Type[Message]]:
    """Map server schema ids ("KRPC.Services", ...) to message classes"""
    return {f"{SCHEMA_NAMESPACE}.{name}": cls for name, cls in MESSAGE_CLASSES.items()}


Argument = MESSAGE_CLASSES["Argument"]
Request = MESSAGE_CLASSES["Request"]
Response = MESSAGE_CLASSES["Response"]
ListMessage = MESSAGE_CLASSES["List"]
SetMessage = MESSAGE_CLASSES["Set"]
TupleMessage = MESSAGE_CLASSES["Tuple"]
DictionaryEntry = MESSAGE_CLASSES["DictionaryEntry"]
DictionaryMessage = MESSAGE_CLASSES["Dictionary"]
Parameter = MESSAGE_CLASSES["Parameter"]
Procedure = MESSAGE_CLASSES["Procedure"]
Class = MESSAGE_CLASSES["Class"]
EnumerationValue = MESSAGE_CLASSES["EnumerationValue"]
Enumeration = MESSAGE_CLASSES["Enumeration"]
Service = MESSAGE_CLASSES["Service"]
Services = MESSAGE_CLASSES["Services"]
Stream = MESSAGE_CLASSES["Stream"]
Status = MESSAGE_CLASSES["Status"]
