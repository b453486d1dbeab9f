"""
Shared fixtures for the attrkit test suite.

Models here are plain Python classes described through a
StaticIntrospector, so resolution is tested without any ORM.
"""

import pytest

from attrkit import (
    Association,
    AttributeRegistry,
    AttributeResolver,
    SchemaColumn,
    StaticIntrospector,
    ValueCodec,
)


# ── Plain record classes ─────────────────────────────────────────────────

class Role:
    def __init__(self, id=None, name=None):
        self.id = id
        self.name = name


class User:
    def __init__(self, id=None, email=None, role_id=None, role=None,
                 first_name="", last_name="", active=1):
        self.id = id
        self.email = email
        self.role_id = role_id
        self.role = role
        self.first_name = first_name
        self.last_name = last_name
        self.active = active

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class Admin(User):
    pass


ROLE_COLUMNS = [
    SchemaColumn("id", "integer", primary_key=True),
    SchemaColumn("name", "string"),
]

USER_COLUMNS = [
    SchemaColumn("id", "integer", primary_key=True),
    SchemaColumn("email", "string"),
    SchemaColumn("role_id", "integer"),
]


@pytest.fixture
def schemas():
    introspector = StaticIntrospector()
    introspector.define(Role, ROLE_COLUMNS)
    introspector.define(
        User,
        USER_COLUMNS,
        associations=[Association("role", "role_id", Role)],
    )
    introspector.define(
        Admin,
        USER_COLUMNS,
        associations=[Association("role", "role_id", Role)],
    )
    return introspector


@pytest.fixture
def registry(schemas):
    return AttributeRegistry(schemas)


@pytest.fixture
def resolver(registry):
    return AttributeResolver(registry)


@pytest.fixture
def codec():
    return ValueCodec()


@pytest.fixture
def admin_role():
    return Role(id=7, name="admin")


@pytest.fixture
def user(admin_role):
    return User(
        id=1,
        email="ada@example.com",
        role_id=admin_role.id,
        role=admin_role,
        first_name="Ada",
        last_name="Lovelace",
    )
