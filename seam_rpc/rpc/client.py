"""
RPC Client

Executes remote procedure calls: binds and encodes the arguments, sends the
length-prefixed Request, blocks for the length-prefixed Response and decodes the
return value.

One request is in flight per client at a time. Calls are never retried and have no
timeout; closing the client from another thread unblocks a pending call with
NotConnectedError.

Example:
    with Client(ClientConfig(name="my client")) as client:
        client.load_services()
        vessel = client.call("SpaceCenter", "get_ActiveVessel")
        client.call("SpaceCenter", "Vessel_get_Name", vessel)
"""

import logging
import threading
import time
from typing import Any, Mapping, Optional, Sequence

from google.protobuf.message import Message

from ..adapters.adapter_interface import ConnectionInterface
from ..adapters.tcp import TcpConnection
from ..codec.scalar import encode_varint
from ..codec.values import decode, decode_message, encode_message
from ..config import ClientConfig
from ..errors import (
    CodecError,
    NotConnectedError,
    RemoteProcedureError,
    SignatureMismatchError,
)
from ..proto.schema import Argument, Request, Response
from ..telemetry.metrics import record_call, record_error
from ..telemetry.tracer import create_span
from ..types import TypeDescriptor, TypeStore
from ..utils.serialization import protobuf_to_dict
from .binder import bind_and_encode
from .procedures import Parameter
from .services import ServiceCatalog

logger = logging.getLogger(__name__)

CORE_SERVICE = "KRPC"
GET_SERVICES = "GetServices"


class Client:
    """Client through which all remote procedure calls are made"""

    def __init__(self,
                 config: Optional[ClientConfig] = None,
                 connection: Optional[ConnectionInterface] = None,
                 type_store: Optional[TypeStore] = None):
        """Create a client

        Args:
            config: Client settings, defaults to ClientConfig()
            connection: Connection to use instead of a TcpConnection built from config
            type_store: Type registry, defaults to a fresh TypeStore
        """
        self.config = config or ClientConfig()
        self.connection = connection or TcpConnection(
            host=self.config.host,
            port=self.config.rpc_port,
            name=self.config.name,
            connect_timeout=self.config.connect_timeout,
        )
        self.type_store = type_store or TypeStore()
        self.catalog = ServiceCatalog(self.type_store)
        self._lock = threading.Lock()

    def connect(self, load_services: bool = False) -> "Client":
        """Connect to the server, optionally loading its service manifest

        Returns:
            Client: self
        """
        self.connection.connect()
        if load_services:
            self.load_services()
        return self

    def close(self) -> bool:
        """Close the connection

        Returns:
            bool: True if the connection was closed, False if it was already closed
        """
        return self.connection.close()

    @property
    def connected(self) -> bool:
        return self.connection.connected

    def __enter__(self) -> "Client":
        if not self.connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def load_services(self) -> int:
        """Fetch the server's service manifest into the catalog

        Returns:
            int: Number of procedures loaded
        """
        services = self.execute_rpc(
            CORE_SERVICE,
            GET_SERVICES,
            return_type=self.type_store[f"{CORE_SERVICE}.Services"],
        )
        return self.catalog.load(services, self)

    def call(self, service: str, procedure: str, /, *args: Any, **kwargs: Any) -> Any:
        """Call a procedure known to the catalog

        Raises:
            UnknownProcedureError: The catalog has no such procedure
        """
        signature = self.catalog.get(service, procedure)
        return self.execute_rpc(
            service,
            procedure,
            args,
            kwargs,
            signature.parameters,
            signature.return_type,
            signature.signature,
        )

    def build_request(self,
                      service: str,
                      procedure: str,
                      args: Sequence[Any] = (),
                      kwargs: Optional[Mapping[str, Any]] = None,
                      parameters: Sequence[Parameter] = (),
                      signature: Optional[str] = None) -> Message:
        """Build the Request message for a call

        Raises:
            SignatureMismatchError: The arguments do not match the parameters
        """
        arguments = bind_and_encode(args, kwargs, parameters, signature or f"{service}.{procedure}")
        return Request(
            service=service,
            procedure=procedure,
            arguments=[Argument(position=arg.position, value=arg.value) for arg in arguments],
        )

    def execute_rpc(self,
                    service: str,
                    procedure: str,
                    args: Sequence[Any] = (),
                    kwargs: Optional[Mapping[str, Any]] = None,
                    parameters: Sequence[Parameter] = (),
                    return_type: Optional[TypeDescriptor] = None,
                    signature: Optional[str] = None) -> Any:
        """Execute a remote procedure call

        Args:
            service: Service name
            procedure: Procedure name
            args: Positional arguments
            kwargs: Keyword arguments
            parameters: The procedure's parameters
            return_type: Type of the return value; None if the procedure returns nothing
            signature: Signature shown in binding errors

        Returns:
            The decoded return value, or None

        Raises:
            SignatureMismatchError: Binding failed; nothing was sent
            RemoteProcedureError: The server reported an error
            NotConnectedError: The connection is not established
            DecodeError: The return value could not be decoded
        """
        try:
            request = self.build_request(service, procedure, args, kwargs, parameters, signature)
        except (SignatureMismatchError, CodecError):
            record_error("bind", service, procedure)
            raise

        span_name = f"{service}.{procedure}"
        attributes = {"rpc.service": service, "rpc.method": procedure}
        with create_span(span_name, attributes, enabled=self.config.enable_tracing):
            start_time = time.time()
            response = self._round_trip(request)
            latency_ms = (time.time() - start_time) * 1000

            if response.has_error:
                logger.error(f"RPC {span_name} failed on the server: {response.error}")
                record_call(service, procedure, latency_ms, "remote_error")
                record_error("remote_error", service, procedure)
                raise RemoteProcedureError(response.error, service, procedure)

            record_call(service, procedure, latency_ms)
            logger.debug(f"RPC {span_name} completed in {latency_ms:.2f}ms")

            if return_type is None:
                return None
            try:
                return decode(response.return_value, return_type, self)
            except CodecError:
                record_error("decode", service, procedure)
                raise

    def _round_trip(self, request: Message) -> Message:
        data = encode_message(request)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Sending request ({len(data)} bytes): {protobuf_to_dict(request)}")

        with self._lock:
            if not self.connected:
                record_error("not_connected", request.service, request.procedure)
                raise NotConnectedError(
                    "RPC call attempted while not connected to server -- call Client.connect first"
                )
            try:
                self.connection.send(encode_varint(len(data)) + data)
                length = self.connection.recv_varint()
                payload = self.connection.recv(length)
            except OSError as e:
                if isinstance(e, NotConnectedError) or not self.connected:
                    record_error("not_connected", request.service, request.procedure)
                    raise NotConnectedError(f"connection lost during RPC: {e}") from e
                raise

        return decode_message(payload, Response)
