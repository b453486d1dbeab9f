"""
Tests for the structured fault types.
"""

import pytest

from attrkit import (
    AttributeFault,
    Fault,
    FaultDomain,
    IntrospectionFault,
    RegistryFault,
    RegistryFrozenFault,
    Severity,
    UnknownAttributeError,
    UnknownAttributeFault,
)


class TestFault:
    def test_base_needs_domain(self):
        with pytest.raises(TypeError):
            Fault("m", code="X")

    def test_domain_base_needs_code(self):
        with pytest.raises(TypeError):
            AttributeFault("m")

    def test_code_passed_to_domain_base(self):
        fault = AttributeFault("bad merge", code="BAD_MERGE", metadata={"model": "User"})
        assert str(fault) == "[BAD_MERGE] bad merge"
        assert fault.args == ("bad merge",)
        assert fault.metadata == {"model": "User"}

    def test_class_code(self):
        class Ambiguous(AttributeFault):
            code = "AMBIGUOUS"

        fault = Ambiguous("two candidates")
        assert fault.code == "AMBIGUOUS"
        assert fault.severity is Severity.ERROR

    @pytest.mark.parametrize("domain, severity", [
        (FaultDomain.ATTRIBUTES, Severity.ERROR),
        (FaultDomain.REGISTRY, Severity.FATAL),
        (FaultDomain.SCHEMA, Severity.ERROR),
    ])
    def test_domain_default_severity(self, domain, severity):
        assert domain.default_severity is severity

    def test_explicit_severity_wins(self):
        fault = RegistryFault("late", code="LATE", severity=Severity.ERROR)
        assert fault.severity is Severity.ERROR

    def test_domain_compares_to_name(self):
        assert FaultDomain.SCHEMA == "schema"
        assert FaultDomain("registry") is FaultDomain.REGISTRY


class TestDomainFaults:
    def test_unknown_attribute(self):
        fault = UnknownAttributeFault("nickname", "User")
        assert isinstance(fault, AttributeFault)
        assert fault.code == "UNKNOWN_ATTRIBUTE"
        assert fault.message == "Unknown attribute 'nickname' for model User"
        assert fault.attribute == "nickname"
        assert fault.model == "User"
        assert fault.metadata == {"attribute": "nickname", "model": "User"}
        assert fault.domain is FaultDomain.ATTRIBUTES

    def test_unknown_attribute_alias(self):
        assert UnknownAttributeError is UnknownAttributeFault
        with pytest.raises(UnknownAttributeError):
            raise UnknownAttributeFault("x", "User")

    def test_registry_frozen(self):
        fault = RegistryFrozenFault("declare", "User")
        assert fault.code == "REGISTRY_FROZEN"
        assert fault.severity is Severity.FATAL
        assert fault.message == "Cannot declare on User: attribute registry is frozen"
        assert fault.metadata == {"operation": "declare", "model": "User"}

    def test_registry_frozen_without_model(self):
        assert RegistryFrozenFault("clear").message == "Cannot clear: attribute registry is frozen"

    def test_introspection(self):
        fault = IntrospectionFault("Plain", "no schema defined")
        assert fault.code == "INTROSPECTION_FAILED"
        assert fault.domain is FaultDomain.SCHEMA
        assert fault.model == "Plain"
        assert str(fault) == "[INTROSPECTION_FAILED] Cannot introspect 'Plain': no schema defined"

    def test_faults_are_exceptions(self):
        for fault in (
            UnknownAttributeFault("x", "User"),
            RegistryFrozenFault("expose"),
            IntrospectionFault("User", "boom"),
        ):
            assert isinstance(fault, Fault)
            assert isinstance(fault, Exception)
