"""
Type Descriptors and Type Store

A type descriptor says how a value is represented on the wire. There are exactly nine
variants (value, enum, class, message, list, set, dictionary, tuple); the value codec
dispatches on them and rejects anything else.

The TypeStore resolves the type strings found in the server's service manifest
(e.g. "Dictionary(string,List(Class(SpaceCenter.Part)))") into descriptors, and
coerces Python values into the representation the codec expects.
"""

import logging
import numbers
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Set, Tuple, Type

from google.protobuf.json_format import ParseError
from google.protobuf.message import Message

from .errors import CoercionError, UnknownTypeError
from .proto.schema import schema_ids
from .remote import RemoteObject
from .utils.serialization import dict_to_protobuf

logger = logging.getLogger(__name__)

# Primitive type name -> Python type
VALUE_TYPES: Dict[str, type] = {
    "int16": int,
    "int32": int,
    "int64": int,
    "uint16": int,
    "uint32": int,
    "uint64": int,
    "float": float,
    "double": float,
    "bool": bool,
    "string": str,
    "bytes": bytes,
}

INTEGER_RANGES: Dict[str, Tuple[int, int]] = {
    "int16": (-(1 << 15), (1 << 15) - 1),
    "int32": (-(1 << 31), (1 << 31) - 1),
    "int64": (-(1 << 63), (1 << 63) - 1),
    "uint16": (0, (1 << 16) - 1),
    "uint32": (0, (1 << 32) - 1),
    "uint64": (0, (1 << 64) - 1),
}

_FLOAT32 = struct.Struct("<f")


class TypeDescriptor:
    """Base class of the nine type descriptor variants"""

    python_type: type = object


@dataclass(frozen=True)
class ValueType(TypeDescriptor):
    """A primitive: integers, float, double, bool, string or bytes"""
    name: str

    def __post_init__(self):
        if self.name not in VALUE_TYPES:
            raise UnknownTypeError(f"unknown value type {self.name!r}")

    @property
    def python_type(self) -> type:
        return VALUE_TYPES[self.name]

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class EnumType(TypeDescriptor):
    """An enumeration; int32 on the wire, symbolic names in Python

    Attributes:
        name: Qualified enum name, e.g. "SpaceCenter.VesselType"
        values: (code, name) pairs
    """
    name: str
    values: Tuple[Tuple[int, str], ...]

    python_type = str

    def __post_init__(self):
        object.__setattr__(self, "_names", dict(self.values))
        object.__setattr__(self, "_codes", {member: code for code, member in self.values})

    @classmethod
    def from_mapping(cls, name: str, mapping: Mapping[int, str]) -> "EnumType":
        return cls(name, tuple(sorted(mapping.items())))

    def code_for(self, member: str) -> Optional[int]:
        return self._codes.get(member)

    def name_for(self, code: int) -> Optional[str]:
        return self._names.get(code)

    @property
    def members(self) -> Tuple[str, ...]:
        return tuple(member for _, member in self.values)

    def __str__(self) -> str:
        return f"Enum({self.name})"


@dataclass(frozen=True)
class ClassType(TypeDescriptor):
    """A server-owned object, uint64 object id on the wire (0 = None)"""
    class_id: str

    python_type = RemoteObject

    def __str__(self) -> str:
        return f"Class({self.class_id})"


@dataclass(frozen=True)
class MessageType(TypeDescriptor):
    """An embedded protobuf message"""
    schema_id: str
    message_class: Type[Message] = field(compare=False, repr=False)

    @property
    def python_type(self) -> type:
        return self.message_class

    def __str__(self) -> str:
        return self.schema_id


@dataclass(frozen=True)
class ListType(TypeDescriptor):
    element_type: TypeDescriptor

    python_type = list

    def __str__(self) -> str:
        return f"List({self.element_type})"


@dataclass(frozen=True)
class SetType(TypeDescriptor):
    element_type: TypeDescriptor

    python_type = set

    def __str__(self) -> str:
        return f"Set({self.element_type})"


@dataclass(frozen=True)
class DictionaryType(TypeDescriptor):
    key_type: TypeDescriptor
    value_type: TypeDescriptor

    python_type = dict

    def __str__(self) -> str:
        return f"Dictionary({self.key_type},{self.value_type})"


@dataclass(frozen=True)
class TupleType(TypeDescriptor):
    element_types: Tuple[TypeDescriptor, ...]

    python_type = tuple

    def __str__(self) -> str:
        return f"Tuple({','.join(str(t) for t in self.element_types)})"


TYPE_VARIANTS = (
    ValueType,
    EnumType,
    ClassType,
    MessageType,
    ListType,
    SetType,
    DictionaryType,
    TupleType,
)


def _split_type_arguments(type_string: str, inner: str) -> list:
    """Split "K,List(V)" on top-level commas"""
    parts = []
    depth = 0
    start = 0
    for i, ch in enumerate(inner):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise UnknownTypeError(f"unbalanced parentheses in type {type_string!r}")
        elif ch == "," and depth == 0:
            parts.append(inner[start:i].strip())
            start = i + 1
    if depth != 0:
        raise UnknownTypeError(f"unbalanced parentheses in type {type_string!r}")
    parts.append(inner[start:].strip())
    if not all(parts):
        raise UnknownTypeError(f"empty type argument in {type_string!r}")
    return parts


class TypeStore:
    """Registry of the messages, enums and remote classes a server exposes

    A new store knows the value types and the envelope messages ("KRPC.Services",
    "KRPC.List", ...). Enums and classes are registered while a service manifest is
    loaded; any type string naming something unregistered is a configuration error.
    """

    PARAMETER_TYPE_ATTRIBUTE = "ParameterType({position})."
    RETURN_TYPE_ATTRIBUTE = "ReturnType."

    def __init__(self):
        self._messages: Dict[str, Type[Message]] = dict(schema_ids())
        self._enums: Dict[str, EnumType] = {}
        self._classes: Set[str] = set()
        self._cache: Dict[str, TypeDescriptor] = {}

    def register_message(self, schema_id: str, message_class: Type[Message]) -> MessageType:
        self._messages[schema_id] = message_class
        self._cache.clear()
        return MessageType(schema_id, message_class)

    def register_enum(self, name: str, values: Mapping[int, str]) -> EnumType:
        enum_type = EnumType.from_mapping(name, values)
        self._enums[name] = enum_type
        self._cache.clear()
        logger.debug(f"Registered enum {name} with {len(enum_type.values)} members")
        return enum_type

    def register_class(self, class_id: str) -> ClassType:
        self._classes.add(class_id)
        self._cache.clear()
        return ClassType(class_id)

    @property
    def classes(self) -> Set[str]:
        return set(self._classes)

    @property
    def enums(self) -> Dict[str, EnumType]:
        return dict(self._enums)

    def __getitem__(self, type_string: str) -> TypeDescriptor:
        return self.parse(type_string)

    def __contains__(self, type_string: str) -> bool:
        try:
            self.parse(type_string)
        except UnknownTypeError:
            return False
        return True

    def parse(self, type_string: str) -> TypeDescriptor:
        """Resolve a manifest type string into a type descriptor

        Raises:
            UnknownTypeError: Malformed string or unregistered name
        """
        type_string = type_string.strip()
        cached = self._cache.get(type_string)
        if cached is not None:
            return cached
        descriptor = self._parse(type_string)
        self._cache[type_string] = descriptor
        return descriptor

    def _parse(self, type_string: str) -> TypeDescriptor:
        if not type_string:
            raise UnknownTypeError("empty type string")

        if "(" not in type_string:
            if type_string in VALUE_TYPES:
                return ValueType(type_string)
            if type_string in self._enums:
                return self._enums[type_string]
            if type_string in self._messages:
                return MessageType(type_string, self._messages[type_string])
            raise UnknownTypeError(f"unknown type {type_string!r}")

        if not type_string.endswith(")"):
            raise UnknownTypeError(f"malformed type {type_string!r}")
        head, _, inner = type_string[:-1].partition("(")
        args = _split_type_arguments(type_string, inner)

        def expect(count: int):
            if len(args) != count:
                raise UnknownTypeError(
                    f"{head} takes {count} type argument(s), got {len(args)} in {type_string!r}"
                )

        if head == "Class":
            expect(1)
            if args[0] not in self._classes:
                raise UnknownTypeError(f"unknown class {args[0]!r}")
            return ClassType(args[0])
        if head == "Enum":
            expect(1)
            if args[0] not in self._enums:
                raise UnknownTypeError(f"unknown enum {args[0]!r}")
            return self._enums[args[0]]
        if head == "List":
            expect(1)
            return ListType(self.parse(args[0]))
        if head == "Set":
            expect(1)
            return SetType(self.parse(args[0]))
        if head == "Dictionary":
            expect(2)
            return DictionaryType(self.parse(args[0]), self.parse(args[1]))
        if head == "Tuple":
            return TupleType(tuple(self.parse(arg) for arg in args))
        raise UnknownTypeError(f"unknown type constructor {head!r} in {type_string!r}")

    def parameter_type(self, position: int, type_string: str,
                       attributes: Iterable[str] = ()) -> TypeDescriptor:
        """Type of the parameter at position, honouring ParameterType(n).<type> attributes"""
        prefix = self.PARAMETER_TYPE_ATTRIBUTE.format(position=position)
        for attribute in attributes:
            if attribute.startswith(prefix):
                return self.parse(attribute[len(prefix):])
        return self.parse(type_string)

    def return_type(self, type_string: str, attributes: Iterable[str] = ()) -> TypeDescriptor:
        """Return type of a procedure, honouring ReturnType.<type> attributes"""
        for attribute in attributes:
            if attribute.startswith(self.RETURN_TYPE_ATTRIBUTE):
                return self.parse(attribute[len(self.RETURN_TYPE_ATTRIBUTE):])
        return self.parse(type_string)

    @staticmethod
    def coerce_to(value: Any, typ: TypeDescriptor) -> Any:
        return coerce_to(value, typ)


def _fail(value: Any, typ: TypeDescriptor) -> CoercionError:
    return CoercionError(f"cannot convert {value!r} to {typ}")


def _coerce_value(value: Any, typ: ValueType) -> Any:
    name = typ.name
    if name in INTEGER_RANGES:
        if isinstance(value, bool):
            raise _fail(value, typ)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, numbers.Integral):
            raise _fail(value, typ)
        low, high = INTEGER_RANGES[name]
        if not low <= value <= high:
            raise CoercionError(f"{value} is out of range for {name}")
        return int(value)
    if name in ("float", "double"):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise _fail(value, typ)
        try:
            result = float(value)
            if name == "float":
                _FLOAT32.pack(result)
        except (OverflowError, struct.error) as e:
            raise CoercionError(f"{value} is out of range for {name}") from e
        return result
    if name == "bool":
        if not isinstance(value, bool):
            raise _fail(value, typ)
        return value
    if name == "string":
        if not isinstance(value, str):
            raise _fail(value, typ)
        return value
    # bytes
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise _fail(value, typ)
    return bytes(value)


def coerce_to(value: Any, typ: TypeDescriptor) -> Any:
    """Convert value to the representation the codec expects for typ

    Raises:
        CoercionError: The value cannot represent typ
        UnknownTypeError: typ is not a type descriptor
    """
    if isinstance(typ, ValueType):
        return _coerce_value(value, typ)

    if isinstance(typ, EnumType):
        if isinstance(value, str) and typ.code_for(value) is not None:
            return value
        if isinstance(value, int) and not isinstance(value, bool) and typ.name_for(value) is not None:
            return typ.name_for(value)
        raise CoercionError(f"{value!r} is not a member of {typ} ({', '.join(typ.members)})")

    if isinstance(typ, ClassType):
        if value is None or isinstance(value, RemoteObject):
            return value
        raise _fail(value, typ)

    if isinstance(typ, MessageType):
        if isinstance(value, typ.message_class):
            return value
        if isinstance(value, Mapping):
            try:
                return dict_to_protobuf(value, typ.message_class)
            except ParseError as e:
                raise CoercionError(f"cannot convert {value!r} to {typ}: {e}") from e
        raise _fail(value, typ)

    if isinstance(typ, ListType):
        if not isinstance(value, (list, tuple)):
            raise _fail(value, typ)
        return [coerce_to(item, typ.element_type) for item in value]

    if isinstance(typ, SetType):
        if not isinstance(value, (set, frozenset, list, tuple)):
            raise _fail(value, typ)
        items = [coerce_to(item, typ.element_type) for item in value]
        try:
            return list(dict.fromkeys(items))
        except TypeError as e:
            raise CoercionError(f"set elements must be hashable: {e}") from e

    if isinstance(typ, DictionaryType):
        if not isinstance(value, Mapping):
            raise _fail(value, typ)
        entries = [
            (coerce_to(key, typ.key_type), coerce_to(item, typ.value_type))
            for key, item in value.items()
        ]
        try:
            return dict(entries)
        except TypeError as e:
            raise CoercionError(f"dictionary keys must be hashable: {e}") from e

    if isinstance(typ, TupleType):
        if not isinstance(value, (list, tuple)) or len(value) != len(typ.element_types):
            raise _fail(value, typ)
        return tuple(coerce_to(item, t) for item, t in zip(value, typ.element_types))

    raise UnknownTypeError(f"not a type descriptor: {typ!r}")
