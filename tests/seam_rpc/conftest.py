"""
Shared fixtures for seam_rpc tests
"""
import pytest

from seam_rpc.adapters.adapter_interface import ConnectionInterface
from seam_rpc.codec.scalar import decode_varint, encode_varint
from seam_rpc.errors import NotConnectedError
from seam_rpc.proto.schema import Request
from seam_rpc.types import TypeStore


class FakeConnection(ConnectionInterface):
    """In-memory connection replaying queued Response messages"""

    def __init__(self, connected: bool = True):
        self.sent = []
        self._buffer = b""
        self._connected = connected

    def queue_response(self, response):
        data = response.SerializeToString()
        self._buffer += encode_varint(len(data)) + data

    def requests(self):
        """Decode every request sent so far"""
        decoded = []
        for frame in self.sent:
            length, pos = decode_varint(frame, 0)
            assert len(frame) - pos == length
            decoded.append(Request.FromString(frame[pos:]))
        return decoded

    def connect(self):
        self._connected = True

    def close(self):
        was_connected = self._connected
        self._connected = False
        return was_connected

    @property
    def connected(self):
        return self._connected

    def send(self, data):
        if not self._connected:
            raise NotConnectedError("fake connection closed")
        self.sent.append(bytes(data))

    def _take(self, length):
        if not self._connected:
            raise NotConnectedError("fake connection closed")
        if len(self._buffer) < length:
            # Server went away
            self._connected = False
            raise ConnectionAbortedError("connection closed by server")
        chunk, self._buffer = self._buffer[:length], self._buffer[length:]
        return chunk

    def recv(self, length):
        if length == 0:
            return b""
        return self._take(length)

    def recv_varint(self):
        data = b""
        while True:
            data += self._take(1)
            if not data[-1] & 0x80:
                return decode_varint(data, 0)[0]


@pytest.fixture
def fake_connection():
    """Connected fake connection with no queued responses"""
    return FakeConnection()


@pytest.fixture
def type_store():
    """Type store with a small test service registered"""
    store = TypeStore()
    store.register_class("Test.Vessel")
    store.register_enum("Test.Mode", {0: "off", 1: "on", 2: "auto"})
    return store


@pytest.fixture
def closed_connection():
    """Fake connection that has not been connected yet"""
    return FakeConnection(connected=False)
