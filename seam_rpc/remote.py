"""
Remote object handles

A RemoteObject refers to an object owned by the server. It never controls the remote
object's lifetime: it is only the (connection, object id) pair needed to pass the
object back to later calls.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, eq=False)
class RemoteObject:
    """Handle to a server-owned object

    Attributes:
        connection: The client (or connection) the handle was received on
        object_id: Nonzero server object id
        class_id: Qualified remote class name, informational only
    """
    connection: Any = field(repr=False)
    object_id: int
    class_id: str = ""

    def __post_init__(self):
        if self.object_id <= 0:
            raise ValueError(f"remote object id must be positive, got {self.object_id}")

    def __eq__(self, other):
        if not isinstance(other, RemoteObject):
            return NotImplemented
        return self.connection is other.connection and self.object_id == other.object_id

    def __hash__(self):
        return hash((id(self.connection), self.object_id))

    def __repr__(self) -> str:
        name = self.class_id or "RemoteObject"
        return f"<{name} #{self.object_id}>"
