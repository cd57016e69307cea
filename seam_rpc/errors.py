"""
Client Error Taxonomy

Every failure raised by seam_rpc derives from RPCClientError. The tree separates:

1. Binding errors (SignatureMismatchError): the call did not match the procedure
   signature. Raised before any I/O, so the request was never sent.
2. Codec errors (CodecError): a value could not be encoded or a payload could not
   be decoded against its type descriptor.
3. RemoteProcedureError: the request was sent and executed, but the server
   reported a failure.
4. Connection errors (NotConnectedError, AlreadyConnectedError).
"""

from typing import Iterable, Optional


class RPCClientError(Exception):
    """Base exception for all seam_rpc errors."""
    pass


class SignatureMismatchError(RPCClientError, TypeError):
    """Arguments supplied to a call do not match the procedure signature.

    Attributes:
        reason: What went wrong, without the signature
        signature: Human-readable signature of the procedure, if known
    """

    def __init__(self, reason: str, signature: Optional[str] = None):
        self.reason = reason
        self.signature = signature
        super().__init__(reason)

    def with_signature(self, signature: Optional[str]) -> "SignatureMismatchError":
        """Attach the procedure signature and return self for re-raising"""
        self.signature = signature
        return self

    def __str__(self) -> str:
        if self.signature:
            return f"{self.reason}\n  signature: {self.signature}"
        return self.reason


class TooManyArgumentsError(SignatureMismatchError):
    """More positional arguments than the procedure has parameters."""

    def __init__(self, given: int, required: int, total: int, signature: Optional[str] = None):
        self.given = given
        self.required = required
        self.total = total
        if required == total:
            expected = f"{total}"
        else:
            expected = f"from {required} to {total}"
        noun = "argument" if expected == "1" else "arguments"
        super().__init__(f"takes {expected} {noun} ({given} given)", signature)


class MissingArgumentError(SignatureMismatchError):
    """A required parameter was supplied neither positionally nor by keyword."""

    def __init__(self, parameter: str, signature: Optional[str] = None):
        self.parameter = parameter
        super().__init__(f'missing argument for parameter "{parameter}"', signature)


class ConflictingArgumentError(SignatureMismatchError):
    """A parameter was supplied both positionally and by keyword."""

    def __init__(self, parameter: str, signature: Optional[str] = None):
        self.parameter = parameter
        super().__init__(
            f'there are both positional and keyword arguments for parameter "{parameter}"',
            signature,
        )


class UnknownKeywordArgumentError(SignatureMismatchError):
    """Keyword arguments name parameters the procedure does not have."""

    def __init__(self, names: Iterable[str], signature: Optional[str] = None):
        self.names = list(names)
        super().__init__(
            f"keyword arguments for non existing parameters: {', '.join(self.names)}",
            signature,
        )


class TypeMismatchError(SignatureMismatchError):
    """An argument cannot be coerced to the declared parameter type."""

    def __init__(self, parameter: str, expected, value, signature: Optional[str] = None):
        self.parameter = parameter
        self.expected = expected
        self.value = value
        super().__init__(
            f'argument for parameter "{parameter}" must be a {expected} '
            f"-- got {value!r} of type {type(value).__name__}",
            signature,
        )


class CodecError(RPCClientError):
    """Base exception for value encoding/decoding failures."""
    pass


class EncodeError(CodecError, TypeError):
    """A value is not representable as the requested type."""
    pass


class ArityError(CodecError, ValueError):
    """A tuple value has a different number of elements than its declared type."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"tuple has {actual} elements, expected {expected}")


class UnknownTypeError(CodecError):
    """A type descriptor or type string is malformed or names an unregistered type."""
    pass


class DecodeError(CodecError, ValueError):
    """A wire payload is malformed or not recognized for its type."""
    pass


class CoercionError(RPCClientError, ValueError):
    """A Python value cannot be converted to a type descriptor's representation."""
    pass


class UnknownProcedureError(RPCClientError, KeyError):
    """The service catalog has no procedure with the requested name."""

    def __init__(self, service: str, procedure: str):
        self.service = service
        self.procedure = procedure
        super().__init__(f"{service}.{procedure}")

    def __str__(self) -> str:
        return f"unknown procedure {self.service}.{self.procedure}"


class RemoteProcedureError(RPCClientError):
    """The server executed the call and reported an error.

    The description is the server's message, unmodified.
    """

    def __init__(self, description: str, service: str = "", procedure: str = ""):
        self.description = description
        self.service = service
        self.procedure = procedure
        super().__init__(description)


class NotConnectedError(RPCClientError, ConnectionError):
    """Send or receive attempted while the connection is not established."""
    pass


class AlreadyConnectedError(RPCClientError, ConnectionError):
    """connect() called on a connection that is already open."""
    pass
