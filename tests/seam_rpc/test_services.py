"""
Tests for the service catalog
"""
import pytest

from seam_rpc.codec.scalar import encode_value
from seam_rpc.errors import UnknownProcedureError, UnknownTypeError
from seam_rpc.proto.schema import (
    Class,
    Enumeration,
    EnumerationValue,
    Parameter,
    Procedure,
    Service,
    Services,
)
from seam_rpc.rpc.procedures import NO_DEFAULT, HasDefault
from seam_rpc.rpc.services import ServiceCatalog
from seam_rpc.types import ClassType, EnumType, TypeStore, ValueType


def make_manifest():
    """Two services, one referencing the other's types"""
    test_service = Service(
        name="Test",
        documentation="Test service",
        procedures=[
            Procedure(
                name="Add",
                parameters=[
                    Parameter(name="x", type="int32"),
                    Parameter(name="y", type="int32", has_default_value=True,
                              default_value=encode_value(5, "int32")),
                ],
                has_return_type=True,
                return_type="int32",
            ),
            Procedure(
                name="Vessel_get_Name",
                parameters=[Parameter(name="this", type="uint64")],
                has_return_type=True,
                return_type="string",
                attributes=["ParameterType(0).Class(Test.Vessel)"],
            ),
            Procedure(
                name="SetMode",
                parameters=[
                    Parameter(name="mode", type="Enum(Other.Mode)", has_default_value=True,
                              default_value=encode_value(1, "int32")),
                ],
            ),
        ],
        classes=[Class(name="Vessel")],
    )
    other_service = Service(
        name="Other",
        enumerations=[
            Enumeration(name="Mode", values=[
                EnumerationValue(name="off", value=0),
                EnumerationValue(name="on", value=1),
            ]),
        ],
    )
    return Services(services=[test_service, other_service])


class TestServiceCatalog:
    """Loading and looking up procedures"""

    def test_load_manifest(self):
        """Test procedures are resolved from a manifest"""
        catalog = ServiceCatalog()
        assert catalog.load(make_manifest()) == 3
        assert len(catalog) == 3
        assert ("Test", "Add") in catalog
        assert catalog.services() == ["Test"]
        assert catalog.documentation("Test") == "Test service"

        add = catalog.get("Test", "Add")
        assert add.return_type == ValueType("int32")
        assert add.parameters[0].default is NO_DEFAULT
        assert add.parameters[1].default == HasDefault(5)
        assert add.signature == "Test.Add(x: int32, y: int32 = 5) -> int32"

    def test_attribute_overrides_parameter_type(self):
        """Test ParameterType attributes turn uint64 ids into classes"""
        catalog = ServiceCatalog()
        catalog.load(make_manifest())
        get_name = catalog.get("Test", "Vessel_get_Name")
        assert get_name.parameters[0].type == ClassType("Test.Vessel")

    def test_types_of_other_services(self):
        """Test enums from a later service resolve, defaults decode to names"""
        catalog = ServiceCatalog()
        catalog.load(make_manifest())
        set_mode = catalog.get("Test", "SetMode")
        assert isinstance(set_mode.parameters[0].type, EnumType)
        assert set_mode.parameters[0].default == HasDefault("on")
        assert set_mode.return_type is None

    def test_registers_types(self):
        """Test classes and enums are registered with the type store"""
        store = TypeStore()
        ServiceCatalog(store).load(make_manifest())
        assert store.classes == {"Test.Vessel"}
        assert "Enum(Other.Mode)" in store

    def test_unknown_procedure(self):
        """Test looking up a procedure the catalog does not have"""
        catalog = ServiceCatalog()
        with pytest.raises(UnknownProcedureError) as excinfo:
            catalog.get("Test", "Missing")
        assert str(excinfo.value) == "unknown procedure Test.Missing"
        assert isinstance(excinfo.value, KeyError)

    def test_unregistered_type(self):
        """Test a manifest referencing an unknown class"""
        manifest = Services(services=[Service(name="Test", procedures=[
            Procedure(name="Get", has_return_type=True, return_type="Class(Test.Ghost)"),
        ])])
        with pytest.raises(UnknownTypeError):
            ServiceCatalog().load(manifest)

    def test_add_rows(self):
        """Test building procedures from manifest rows"""
        int32 = ValueType("int32")
        catalog = ServiceCatalog()
        procedures = catalog.add_rows("Math", [
            ("Add", "x", int32, NO_DEFAULT, int32),
            ("Add", "y", int32, HasDefault(5), int32),
            ("Reset", None, None, NO_DEFAULT, None),
        ])
        assert [p.name for p in procedures] == ["Add", "Reset"]
        assert catalog.get("Math", "Add").required_count == 1
        assert catalog.get("Math", "Reset").parameters == ()
        assert [p.name for p in catalog.procedures("Math")] == ["Add", "Reset"]
