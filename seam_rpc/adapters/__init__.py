"""
Connection Adapters

- adapter_interface: the connection contract used by the client
- tcp: blocking TCP connection with the server hello handshake
"""

from .adapter_interface import ConnectionInterface
from .tcp import TcpConnection

__all__ = [
    "ConnectionInterface",
    "TcpConnection",
]
