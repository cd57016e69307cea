"""
RPC call layer

- procedures: parameter and procedure descriptors
- binder: argument binding and sparse argument encoding
- services: service catalog built from the server manifest
- client: call executor
"""

from .binder import EncodedArgument, bind_and_encode
from .client import Client
from .procedures import NO_DEFAULT, HasDefault, NoDefault, Parameter, Procedure
from .services import ServiceCatalog

__all__ = [
    "Client",
    "EncodedArgument",
    "bind_and_encode",
    "NO_DEFAULT",
    "NoDefault",
    "HasDefault",
    "Parameter",
    "Procedure",
    "ServiceCatalog",
]
