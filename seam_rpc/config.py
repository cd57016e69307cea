"""
Configuration settings for the RPC client
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .adapters.tcp import DEFAULT_SERVER_HOST, DEFAULT_SERVER_RPC_PORT, encode_client_name


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfig:
    """Connection and telemetry settings of a Client"""
    name: str = ""
    host: str = DEFAULT_SERVER_HOST
    rpc_port: int = DEFAULT_SERVER_RPC_PORT
    connect_timeout: Optional[float] = 10.0  # Seconds; None blocks. Calls never time out.

    # Tracing configuration
    enable_tracing: bool = True
    service_name: str = "seam_rpc.client"

    def __post_init__(self):
        # Raises ValueError for names longer than the handshake allows
        encode_client_name(self.name)
        if not 0 < self.rpc_port < 65536:
            raise ValueError(f"rpc_port must be between 1 and 65535, got {self.rpc_port}")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create config from environment variables"""
        timeout = os.getenv("SEAM_RPC_CONNECT_TIMEOUT")
        if timeout is None:
            connect_timeout = cls.connect_timeout
        elif timeout.strip().lower() in ("", "none"):
            connect_timeout = None
        else:
            connect_timeout = float(timeout)

        return cls(
            name=os.getenv("SEAM_RPC_NAME", ""),
            host=os.getenv("SEAM_RPC_HOST", DEFAULT_SERVER_HOST),
            rpc_port=int(os.getenv("SEAM_RPC_PORT", str(DEFAULT_SERVER_RPC_PORT))),
            connect_timeout=connect_timeout,
            enable_tracing=_env_bool(os.getenv("SEAM_RPC_ENABLE_TRACING", "true")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "name": self.name,
            "host": self.host,
            "rpc_port": self.rpc_port,
            "connect_timeout": self.connect_timeout,
            "enable_tracing": self.enable_tracing,
            "service_name": self.service_name,
        }
