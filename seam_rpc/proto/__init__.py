"""
Protobuf envelope messages (Request/Response, container wrappers, service manifest)
"""

from .schema import MESSAGE_CLASSES, message_class, schema_ids

__all__ = ["MESSAGE_CLASSES", "message_class", "schema_ids"]
