"""
seam_rpc: client runtime for a length-prefixed binary RPC protocol

Local calls are bound against the server's procedure signatures, encoded with a
type-directed codec into protobuf envelopes, and their responses decoded back into
typed Python values, including handles to server-owned objects.

Components:
1. types: type descriptors and the type store (manifest type strings, coercion)
2. codec: scalar and value encoding/decoding
3. rpc: argument binding, service catalog and the Client call executor
4. adapters: the connection contract and its TCP implementation
5. telemetry: OpenTelemetry spans and metrics around calls
"""

from .codec import decode, encode
from .config import ClientConfig
from .errors import (
    AlreadyConnectedError,
    ArityError,
    CodecError,
    CoercionError,
    ConflictingArgumentError,
    DecodeError,
    EncodeError,
    MissingArgumentError,
    NotConnectedError,
    RemoteProcedureError,
    RPCClientError,
    SignatureMismatchError,
    TooManyArgumentsError,
    TypeMismatchError,
    UnknownKeywordArgumentError,
    UnknownProcedureError,
    UnknownTypeError,
)
from .remote import RemoteObject
from .rpc import (
    NO_DEFAULT,
    Client,
    EncodedArgument,
    HasDefault,
    NoDefault,
    Parameter,
    Procedure,
    ServiceCatalog,
    bind_and_encode,
)
from .types import (
    ClassType,
    DictionaryType,
    EnumType,
    ListType,
    MessageType,
    SetType,
    TupleType,
    TypeDescriptor,
    TypeStore,
    ValueType,
)

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ClientConfig",
    "encode",
    "decode",
    "bind_and_encode",
    "EncodedArgument",
    "NO_DEFAULT",
    "NoDefault",
    "HasDefault",
    "Parameter",
    "Procedure",
    "ServiceCatalog",
    "RemoteObject",
    "TypeDescriptor",
    "TypeStore",
    "ValueType",
    "EnumType",
    "ClassType",
    "MessageType",
    "ListType",
    "SetType",
    "DictionaryType",
    "TupleType",
    "RPCClientError",
    "SignatureMismatchError",
    "TooManyArgumentsError",
    "MissingArgumentError",
    "ConflictingArgumentError",
    "UnknownKeywordArgumentError",
    "TypeMismatchError",
    "CodecError",
    "EncodeError",
    "ArityError",
    "UnknownTypeError",
    "DecodeError",
    "CoercionError",
    "UnknownProcedureError",
    "RemoteProcedureError",
    "NotConnectedError",
    "AlreadyConnectedError",
]
