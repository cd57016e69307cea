"""
Service Catalog

Holds the procedure signatures a server exposes. The catalog is filled from the
server's service manifest (a KRPC.Services message) or from plain manifest rows.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from google.protobuf.message import Message

from ..codec.values import decode
from ..errors import UnknownProcedureError
from ..types import TypeDescriptor, TypeStore
from .procedures import NO_DEFAULT, Default, HasDefault, Parameter, Procedure

logger = logging.getLogger(__name__)

# (procedure name, parameter name, parameter type, default-or-sentinel, return type)
ManifestRow = Tuple[str, Optional[str], Optional[TypeDescriptor], Default, Optional[TypeDescriptor]]


class ServiceCatalog:
    """Procedure signatures keyed by (service, procedure)"""

    def __init__(self, type_store: Optional[TypeStore] = None):
        self.type_store = type_store or TypeStore()
        self._procedures: Dict[Tuple[str, str], Procedure] = OrderedDict()
        self._documentation: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._procedures)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._procedures

    def add(self, procedure: Procedure) -> Procedure:
        self._procedures[(procedure.service, procedure.name)] = procedure
        return procedure

    def get(self, service: str, procedure: str) -> Procedure:
        """Look up a procedure

        Raises:
            UnknownProcedureError: No such procedure is known
        """
        try:
            return self._procedures[(service, procedure)]
        except KeyError:
            raise UnknownProcedureError(service, procedure) from None

    def services(self) -> List[str]:
        return list(OrderedDict.fromkeys(service for service, _ in self._procedures))

    def procedures(self, service: str) -> List[Procedure]:
        return [p for (s, _), p in self._procedures.items() if s == service]

    def documentation(self, service: str) -> str:
        return self._documentation.get(service, "")

    def load(self, services: Message, connection: Any = None) -> int:
        """Load a KRPC.Services manifest

        Classes and enumerations of every service are registered with the type store
        before any procedure is resolved, since procedures may reference types of
        other services.

        Args:
            services: Decoded KRPC.Services message
            connection: Client that remote object defaults are bound to

        Returns:
            int: Number of procedures loaded

        Raises:
            UnknownTypeError: The manifest references an unregistered or malformed type
        """
        for service in services.services:
            for cls in service.classes:
                self.type_store.register_class(f"{service.name}.{cls.name}")
            for enumeration in service.enumerations:
                self.type_store.register_enum(
                    f"{service.name}.{enumeration.name}",
                    {value.value: value.name for value in enumeration.values},
                )

        count = 0
        for service in services.services:
            self._documentation[service.name] = service.documentation
            for procedure in service.procedures:
                self.add(self._procedure_from_message(service.name, procedure, connection))
                count += 1
            logger.debug(f"Loaded {len(service.procedures)} procedures of service {service.name}")

        logger.info(f"Service catalog loaded {count} procedures from {len(services.services)} services")
        return count

    def _procedure_from_message(self, service: str, message: Message, connection: Any) -> Procedure:
        attributes = list(message.attributes)
        parameters = []
        for position, param in enumerate(message.parameters):
            param_type = self.type_store.parameter_type(position, param.type, attributes)
            default: Default = NO_DEFAULT
            if param.has_default_value:
                default = HasDefault(decode(param.default_value, param_type, connection))
            parameters.append(Parameter(param.name, param_type, default))

        return_type = None
        if message.has_return_type:
            return_type = self.type_store.return_type(message.return_type, attributes)

        return Procedure(
            service=service,
            name=message.name,
            parameters=tuple(parameters),
            return_type=return_type,
            documentation=message.documentation,
        )

    def add_rows(self, service: str, rows: Iterable[ManifestRow]) -> List[Procedure]:
        """Build procedures from manifest rows

        Rows of one procedure must be consecutive and in parameter order. A row with
        a None parameter name declares a procedure without parameters.
        """
        grouped: Dict[str, dict] = OrderedDict()
        for name, param_name, param_type, default, return_type in rows:
            entry = grouped.setdefault(name, {"parameters": [], "return_type": return_type})
            if param_name is not None:
                entry["parameters"].append(Parameter(param_name, param_type, default))

        return [
            self.add(Procedure(service, name, tuple(entry["parameters"]), entry["return_type"]))
            for name, entry in grouped.items()
        ]
