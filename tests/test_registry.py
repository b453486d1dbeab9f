"""
Tests for AttributeRegistry: declarations, exclusion, exposure,
inheritance, and the freeze discipline.
"""

import pytest

from attrkit import AttrType, AttributeRegistry, RegistryFrozenFault, Severity
from tests.conftest import Admin, User


def declared_names(registry, model):
    return [d["name"] for d in registry.declared(model)]


class TestDeclare:
    def test_appends_in_declaration_order(self, registry):
        registry.declare(User, "b")
        registry.declare(User, "a")
        assert declared_names(registry, User) == ["b", "a"]

    def test_primary_key_goes_first(self, registry):
        registry.declare(User, "email")
        registry.declare(User, "id", label="ID")
        assert declared_names(registry, User) == ["id", "email"]

    def test_redeclare_merges(self, registry):
        registry.declare(User, "email", label="Email", read_only=True)
        registry.declare(User, "email", read_only=False)

        declared = registry.declaration(User, "email")
        assert declared_names(registry, User) == ["email"]
        assert declared["label"] == "Email"
        assert declared["read_only"] is False

    def test_type_becomes_attr_type(self, registry):
        registry.declare(User, "recent", type="boolean", read_only=True)
        declared = registry.declaration(User, "recent")
        assert declared["attr_type"] == AttrType.BOOLEAN
        assert "type" not in declared

    def test_python_type_accepted(self, registry):
        registry.declare(User, "score", type=float)
        assert registry.declaration(User, "score")["attr_type"] == AttrType.FLOAT

    def test_unknown_type_name_kept(self, registry):
        registry.declare(User, "colour", type="Color")
        assert registry.declaration(User, "colour")["attr_type"] == "color"

    def test_no_type_no_attr_type(self, registry):
        registry.declare(User, "email", read_only=True)
        assert "attr_type" not in registry.declaration(User, "email")

    def test_declared_is_read_only_view(self, registry):
        registry.declare(User, "email")
        view = registry.declared(User)[0]
        with pytest.raises(TypeError):
            view["label"] = "x"


class TestExcludeExpose:
    def test_defaults(self, registry):
        assert registry.declared(User) == ()
        assert registry.excluded(User) == ()
        assert registry.exposed(User) is None

    def test_exclude_replaces(self, registry):
        registry.exclude(User, "a", "b")
        registry.exclude(User, "c")
        assert registry.excluded(User) == ("c",)

    def test_expose_inserts_and_declares_primary_key(self, registry):
        registry.expose(User, "email")
        assert registry.exposed(User) == ("id", "email")
        assert declared_names(registry, User) == ["id"]

    def test_expose_with_primary_key_listed(self, registry):
        registry.expose(User, "email", "id")
        assert registry.exposed(User) == ("email", "id")
        assert registry.declared(User) == ()

    def test_expose_keeps_existing_primary_key_declaration(self, registry):
        registry.declare(User, "id", label="#")
        registry.expose(User, "email")
        assert declared_names(registry, User) == ["id"]
        assert registry.declaration(User, "id")["label"] == "#"

    def test_expose_replaces(self, registry):
        registry.expose(User, "email")
        registry.expose(User, "role__name")
        assert registry.exposed(User) == ("id", "role__name")

    def test_without_introspector_no_primary_key(self):
        registry = AttributeRegistry()
        registry.expose(User, "email")
        assert registry.exposed(User) == ("email",)


class TestInheritance:
    def test_register_copies_supertype(self, registry):
        registry.declare(User, "full_name")
        registry.exclude(User, "email")
        registry.register(Admin)

        assert declared_names(registry, Admin) == ["full_name"]
        assert registry.excluded(Admin) == ("email",)

    def test_subtype_changes_isolated(self, registry):
        registry.declare(User, "full_name")
        registry.declare(Admin, "full_name", label="Name")

        assert "label" not in registry.declaration(User, "full_name")
        assert registry.declaration(Admin, "full_name")["label"] == "Name"

    def test_register_idempotent(self, registry):
        registry.declare(User, "full_name")
        registry.register(Admin)
        registry.declare(Admin, "level")
        registry.register(Admin)
        assert declared_names(registry, Admin) == ["full_name", "level"]

    def test_unregistered_read_falls_back(self, registry):
        registry.declare(User, "full_name")
        assert declared_names(registry, Admin) == ["full_name"]
        assert not registry.is_registered(Admin)

    def test_models(self, registry):
        registry.declare(User, "a")
        registry.declare(Admin, "b")
        assert registry.models() == (User, Admin)


class TestFreeze:
    @pytest.mark.parametrize("operation, args", [
        ("declare", ("email",)),
        ("exclude", ("email",)),
        ("expose", ("email",)),
        ("register", ()),
    ])
    def test_mutations_refused(self, registry, operation, args):
        registry.freeze()
        with pytest.raises(RegistryFrozenFault) as exc_info:
            getattr(registry, operation)(User, *args)
        assert exc_info.value.code == "REGISTRY_FROZEN"
        assert exc_info.value.severity == Severity.FATAL

    def test_reads_allowed(self, registry):
        registry.declare(User, "full_name")
        registry.freeze()
        assert registry.frozen
        assert declared_names(registry, User) == ["full_name"]

    def test_register_of_known_model_is_noop_when_frozen(self, registry):
        registry.declare(User, "full_name")
        registry.freeze()
        registry.register(User)

    def test_clear(self, registry):
        registry.declare(User, "full_name")
        registry.clear()
        assert registry.models() == ()

    def test_clear_refused_when_frozen(self, registry):
        registry.freeze()
        with pytest.raises(RegistryFrozenFault):
            registry.clear()
