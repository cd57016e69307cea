"""
Procedure and parameter descriptors
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

from ..types import TypeDescriptor


class NoDefault:
    """Marks a parameter without a default value (a required parameter)"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __reduce__(self):
        return (NoDefault, ())


NO_DEFAULT = NoDefault()


@dataclass(frozen=True)
class HasDefault:
    """A declared default value; HasDefault(None) is a real default"""
    value: Any


Default = Union[NoDefault, HasDefault]


@dataclass(frozen=True)
class Parameter:
    name: str
    type: TypeDescriptor
    default: Default = NO_DEFAULT

    @property
    def required(self) -> bool:
        return isinstance(self.default, NoDefault)

    def is_default(self, value: Any) -> bool:
        """Whether value equals the declared default (never true for required parameters)"""
        if not isinstance(self.default, HasDefault):
            return False
        default = self.default.value
        # bool compares equal to 0 and 1; never treat one as the other's default
        if isinstance(value, bool) != isinstance(default, bool):
            return False
        return bool(value == default)

    def __str__(self) -> str:
        if isinstance(self.default, HasDefault):
            return f"{self.name}: {self.type} = {self.default.value!r}"
        return f"{self.name}: {self.type}"


@dataclass(frozen=True)
class Procedure:
    """A remote procedure signature

    Attributes:
        service: Service name
        name: Procedure name
        parameters: Ordered parameters, required ones first
        return_type: Type of the return value, None if the procedure returns nothing
        documentation: Server-provided documentation, if any
    """
    service: str
    name: str
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[TypeDescriptor] = None
    documentation: str = field(default="", compare=False)

    @property
    def required_count(self) -> int:
        return sum(1 for parameter in self.parameters if parameter.required)

    @property
    def qualified_name(self) -> str:
        return f"{self.service}.{self.name}"

    @property
    def signature(self) -> str:
        """Human-readable signature, e.g. "SpaceCenter.WarpTo(ut: double) -> None" """
        params = ", ".join(str(parameter) for parameter in self.parameters)
        returns = str(self.return_type) if self.return_type is not None else "None"
        return f"{self.qualified_name}({params}) -> {returns}"
