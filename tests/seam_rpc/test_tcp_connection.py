"""
Tests for the TCP connection adapter against a local socket server
"""
import socket
import threading

import pytest

from seam_rpc.adapters.tcp import HELLO_RPC_HEADER, TcpConnection, encode_client_name
from seam_rpc.codec.scalar import decode_varint, encode_value, encode_varint
from seam_rpc.config import ClientConfig
from seam_rpc.errors import AlreadyConnectedError, NotConnectedError
from seam_rpc.proto.schema import Request, Response
from seam_rpc.rpc.client import Client
from seam_rpc.rpc.procedures import HasDefault, Parameter
from seam_rpc.types import ValueType

CLIENT_ID = bytes(range(16))
INT32 = ValueType("int32")


def recv_exact(conn, length):
    data = b""
    while len(data) < length:
        chunk = conn.recv(length - len(data))
        if not chunk:
            raise ConnectionError("client went away")
        data += chunk
    return data


def recv_varint(conn):
    data = b""
    while True:
        data += recv_exact(conn, 1)
        if not data[-1] & 0x80:
            return decode_varint(data)[0]


class LocalServer:
    """Accepts one client, handshakes, then answers requests from a script

    Each script entry is a Response to send back, or None to read the request
    and hang up without answering.
    """

    def __init__(self, script=()):
        self.script = list(script)
        self.hello = None
        self.requests = []
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self._sock.settimeout(5)
        self.port = self._sock.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            conn, _ = self._sock.accept()
        except socket.timeout:
            return
        with conn:
            conn.settimeout(5)
            self.hello = recv_exact(conn, len(HELLO_RPC_HEADER) + 32)
            conn.sendall(CLIENT_ID)
            for response in self.script:
                length = recv_varint(conn)
                self.requests.append(Request.FromString(recv_exact(conn, length)))
                if response is None:
                    break
                data = response.SerializeToString()
                conn.sendall(encode_varint(len(data)) + data)

    def stop(self):
        self._thread.join(timeout=5)
        self._sock.close()


@pytest.fixture
def server_factory():
    servers = []

    def start(script=()):
        server = LocalServer(script)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.stop()


class TestTcpConnection:
    """Connection lifecycle and handshake"""

    def test_handshake(self, server_factory):
        """Test the hello message and the client identifier"""
        server = server_factory()
        connection = TcpConnection("127.0.0.1", server.port, name="probe")

        connection.connect()

        assert connection.connected
        assert connection.client_id == CLIENT_ID
        assert server.hello == HELLO_RPC_HEADER + b"probe" + b"\x00" * 27
        assert connection.close() is True
        assert connection.close() is False
        assert not connection.connected

    def test_connect_twice(self, server_factory):
        """Test connecting an open connection"""
        server = server_factory()
        connection = TcpConnection("127.0.0.1", server.port)
        connection.connect()
        try:
            with pytest.raises(AlreadyConnectedError):
                connection.connect()
        finally:
            connection.close()

    def test_not_connected(self):
        """Test I/O before connecting"""
        connection = TcpConnection("127.0.0.1", 50000)
        with pytest.raises(NotConnectedError):
            connection.send(b"\x00")
        with pytest.raises(NotConnectedError):
            connection.recv(1)

    def test_connection_refused(self):
        """Test connecting to a port nobody listens on"""
        probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
        probe.close()

        connection = TcpConnection("127.0.0.1", port, connect_timeout=2)
        with pytest.raises(OSError):
            connection.connect()
        assert not connection.connected


class TestClientOverTcp:
    """Full calls over a socket"""

    def test_round_trip(self, server_factory):
        """Test a call over TCP"""
        server = server_factory([
            Response(has_return_value=True, return_value=encode_value(8, "int32")),
        ])
        parameters = (Parameter("x", INT32), Parameter("y", INT32, HasDefault(5)))
        config = ClientConfig(name="probe", rpc_port=server.port, enable_tracing=False)

        with Client(config) as client:
            assert client.execute_rpc("Test", "Add", (3,), {}, parameters, INT32) == 8

        request, = server.requests
        assert (request.service, request.procedure) == ("Test", "Add")
        assert [(a.position, a.value) for a in request.arguments] == [(0, b"\x03")]

    def test_server_hangs_up(self, server_factory):
        """Test a call pending when the server closes the connection"""
        server = server_factory([None])
        client = Client(ClientConfig(rpc_port=server.port, enable_tracing=False))
        client.connect()

        with pytest.raises(NotConnectedError):
            client.execute_rpc("Test", "Reset")
        assert not client.connected


class TestClientName:
    """Handshake name encoding"""

    def test_padding(self):
        """Test names are zero padded to 32 bytes"""
        assert encode_client_name("") == b"\x00" * 32
        assert encode_client_name("é") == b"\xc3\xa9" + b"\x00" * 30

    def test_too_long(self):
        """Test names over 32 bytes of UTF-8 are rejected"""
        with pytest.raises(ValueError):
            encode_client_name("é" * 17)
