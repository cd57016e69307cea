"""
Argument Binder

Resolves a call's positional and keyword arguments against a procedure's parameters
and encodes them into the sparse argument list of a request. Optional parameters whose
effective value equals their declared default are left out; the remaining arguments
keep their signature position.
"""

import logging
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence

from ..codec.values import encode
from ..errors import (
    CoercionError,
    ConflictingArgumentError,
    MissingArgumentError,
    SignatureMismatchError,
    TooManyArgumentsError,
    TypeMismatchError,
    UnknownKeywordArgumentError,
)
from ..types import coerce_to
from .procedures import Parameter

logger = logging.getLogger(__name__)


class EncodedArgument(NamedTuple):
    position: int
    value: bytes


def bind_and_encode(args: Sequence[Any],
                    kwargs: Optional[Mapping[str, Any]],
                    parameters: Sequence[Parameter],
                    signature: Optional[str] = None) -> List[EncodedArgument]:
    """Bind call arguments to parameters and encode them

    Args:
        args: Positional arguments
        kwargs: Keyword arguments
        parameters: Procedure parameters in declared order
        signature: Procedure signature attached to binding errors

    Returns:
        List: Encoded arguments in ascending position, defaults omitted

    Raises:
        TooManyArgumentsError: More positional arguments than parameters
        ConflictingArgumentError: A parameter given both positionally and by keyword
        MissingArgumentError: A required parameter not given
        TypeMismatchError: An argument cannot be coerced to its parameter type
        UnknownKeywordArgumentError: Keywords naming no parameter
    """
    try:
        return _bind(args, kwargs or {}, parameters)
    except SignatureMismatchError as err:
        err.with_signature(signature)
        raise


def _bind(args: Sequence[Any], kwargs: Mapping[str, Any],
          parameters: Sequence[Parameter]) -> List[EncodedArgument]:
    required_count = sum(1 for parameter in parameters if parameter.required)
    if len(args) > len(parameters):
        raise TooManyArgumentsError(len(args), required_count, len(parameters))

    bound = []
    for i, parameter in enumerate(parameters):
        is_kwarg = parameter.name in kwargs
        is_positional = i < len(args)
        if is_kwarg and is_positional:
            raise ConflictingArgumentError(parameter.name)

        is_optional = i >= required_count
        if is_kwarg:
            has_default_value = parameter.is_default(kwargs[parameter.name])
        elif is_positional:
            has_default_value = parameter.is_default(args[i])
        else:
            has_default_value = True

        if is_optional and has_default_value:
            continue

        if is_kwarg:
            value = kwargs[parameter.name]
        elif is_positional:
            value = args[i]
        else:
            raise MissingArgumentError(parameter.name)

        try:
            value = coerce_to(value, parameter.type)
        except CoercionError as e:
            raise TypeMismatchError(parameter.name, parameter.type, value) from e

        bound.append(EncodedArgument(i, encode(value, parameter.type)))

    names = {parameter.name for parameter in parameters}
    unknown = [name for name in kwargs if name not in names]
    if unknown:
        raise UnknownKeywordArgumentError(unknown)

    logger.debug(f"Bound {len(bound)} of {len(parameters)} arguments")
    return bound
