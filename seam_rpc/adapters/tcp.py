"""
TCP connection adapter

Plain blocking TCP socket speaking the RPC server's handshake: a 12 byte hello header
followed by the client name (UTF-8, zero-padded to 32 bytes), answered by a 16 byte
client identifier.
"""

import logging
import socket
from typing import Optional

from ..codec.scalar import decode_varint
from ..errors import AlreadyConnectedError, NotConnectedError
from .adapter_interface import ConnectionInterface

logger = logging.getLogger(__name__)

HELLO_RPC_HEADER = b"HELLO-RPC\x00\x00\x00"
NAME_LENGTH = 32
CLIENT_ID_LENGTH = 16
MAX_VARINT_LENGTH = 10

DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_RPC_PORT = 50000


def encode_client_name(name: str) -> bytes:
    """Client name as sent in the handshake

    Raises:
        ValueError: The name is longer than 32 bytes of UTF-8
    """
    encoded = name.encode("utf-8")
    if len(encoded) > NAME_LENGTH:
        raise ValueError(f"client name must be at most {NAME_LENGTH} bytes of UTF-8, got {len(encoded)}")
    return encoded.ljust(NAME_LENGTH, b"\x00")


class TcpConnection(ConnectionInterface):
    """RPC connection over TCP"""

    def __init__(self,
                 host: str = DEFAULT_SERVER_HOST,
                 port: int = DEFAULT_SERVER_RPC_PORT,
                 name: str = "",
                 connect_timeout: Optional[float] = 10.0):
        """Create an unconnected TCP connection

        Args:
            host: Server host name or address
            port: Server RPC port
            name: Client name sent in the handshake
            connect_timeout: Seconds to wait while connecting and handshaking; None blocks.
                Calls made after connecting never time out.
        """
        self.host = host
        self.port = port
        self.name = name
        self.connect_timeout = connect_timeout
        self.client_id: Optional[bytes] = None
        self._socket: Optional[socket.socket] = None
        self._hello = HELLO_RPC_HEADER + encode_client_name(name)

    @property
    def connected(self) -> bool:
        return self._socket is not None

    def connect(self) -> None:
        if self._socket is not None:
            raise AlreadyConnectedError(f"already connected to {self.host}:{self.port}")

        sock = socket.create_connection((self.host, self.port), timeout=self.connect_timeout)
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            self._socket = sock
            self.send(self._hello)
            self.client_id = self.recv(CLIENT_ID_LENGTH)
            sock.settimeout(None)
        except Exception:
            self._socket = None
            sock.close()
            raise

        logger.info(f"Connected to RPC server at {self.host}:{self.port}, client id {self.client_id.hex()}")

    def close(self) -> bool:
        if self._socket is None:
            return False
        sock, self._socket = self._socket, None
        self.client_id = None
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone
            pass
        sock.close()
        logger.info(f"Closed connection to {self.host}:{self.port}")
        return True

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise NotConnectedError(f"not connected to {self.host}:{self.port}")
        return self._socket

    def send(self, data: bytes) -> None:
        sock = self._require_socket()
        try:
            sock.sendall(data)
        except ConnectionError:
            logger.warning(f"Connection to {self.host}:{self.port} lost while sending")
            self.close()
            raise

    def recv(self, length: int) -> bytes:
        sock = self._require_socket()
        chunks = []
        remaining = length
        while remaining > 0:
            try:
                chunk = sock.recv(remaining)
            except ConnectionError:
                logger.warning(f"Connection to {self.host}:{self.port} lost while receiving")
                self.close()
                raise
            if not chunk:
                logger.warning(f"Connection to {self.host}:{self.port} closed by server")
                self.close()
                raise ConnectionAbortedError("connection closed by server")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def recv_varint(self) -> int:
        data = b""
        while len(data) < MAX_VARINT_LENGTH:
            data += self.recv(1)
            if not data[-1] & 0x80:
                return decode_varint(data)[0]
        raise ConnectionError(f"length prefix longer than {MAX_VARINT_LENGTH} bytes")

    def __repr__(self) -> str:
        state = "connected" if self.connected else "closed"
        return f"<TcpConnection {self.host}:{self.port} {state}>"
