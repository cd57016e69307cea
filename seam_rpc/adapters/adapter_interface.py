"""
Connection adapter interface

Defines the byte-stream connection the call executor talks through. The codec and
binder never use it; only the client does.
"""

import abc


class ConnectionInterface(abc.ABC):
    """Byte-stream connection to an RPC server"""

    @abc.abstractmethod
    def connect(self) -> None:
        """Open the connection

        Raises:
            AlreadyConnectedError: The connection is already open
            OSError: The server cannot be reached
        """
        pass

    @abc.abstractmethod
    def close(self) -> bool:
        """Close the connection

        Returns:
            bool: True if an open connection was closed, False if it was already closed
        """
        pass

    @property
    @abc.abstractmethod
    def connected(self) -> bool:
        """Whether the connection is open"""
        pass

    @abc.abstractmethod
    def send(self, data: bytes) -> None:
        """Send all of data

        Raises:
            NotConnectedError: The connection is not open
        """
        pass

    @abc.abstractmethod
    def recv(self, length: int) -> bytes:
        """Receive exactly length bytes, blocking until they arrive

        Raises:
            NotConnectedError: The connection is not open
            ConnectionAbortedError: The peer closed the connection
        """
        pass

    @abc.abstractmethod
    def recv_varint(self) -> int:
        """Receive an unsigned varint (a message length prefix)"""
        pass
