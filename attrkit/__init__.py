"""
attrkit - canonical attribute shapes for data-model types.

Reconciles what a model author declares, what the storage schema says,
and how models associate, into one ordered list of attribute
descriptors that grid and form builders can render without restating
anything the schema already knows.

Quick Start::

    from attrkit import attribute, exclude_attributes, resolve, ValueCodec

    @attribute("full_name", getter=lambda u: f"{u.first_name} {u.last_name}")
    @exclude_attributes("crypted_password")
    class User(Base):
        __tablename__ = "users"
        id: Mapped[int] = mapped_column(primary_key=True)
        email: Mapped[str]
        role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"))
        role: Mapped[Role] = relationship()

    descriptors = resolve(User)        # id, email, role__name, full_name
    rows = [ValueCodec().to_sequence(u, descriptors) for u in users]
"""

from typing import Any, Tuple

from .codec import ValueCodec
from .config import AttrkitConfig, ConfigError, ConfigLoader, DEFAULT_CONFIG
from .declarations import attribute, default_registry, exclude_attributes, expose_attributes
from .descriptors import AttrType, AttributeDescriptor, ValueAccessor, coerce_attr_type
from .faults import (
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
from .introspection import (
    Association,
    SchemaColumn,
    SchemaIntrospector,
    SQLAlchemyIntrospector,
    StaticIntrospector,
    TableSchema,
)
from .naming import (
    ASSOCIATION_SEPARATOR,
    AssociationNameResolver,
    association_attr_name,
    is_association_attr,
)
from .registry import AttributeRegistry
from .resolver import AttributeResolver
from .schema import generate_columns, generate_schema

__version__ = "0.3.0"

default_resolver = AttributeResolver(default_registry)


def resolve(model: Any) -> Tuple[AttributeDescriptor, ...]:
    """Resolve ``model`` against the default registry."""
    return default_resolver.resolve(model)


__all__ = [
    # Descriptors
    "AttrType",
    "AttributeDescriptor",
    "ValueAccessor",
    "coerce_attr_type",
    # Registry & declarations
    "AttributeRegistry",
    "default_registry",
    "attribute",
    "exclude_attributes",
    "expose_attributes",
    # Resolution
    "AttributeResolver",
    "AssociationNameResolver",
    "ASSOCIATION_SEPARATOR",
    "association_attr_name",
    "is_association_attr",
    "default_resolver",
    "resolve",
    # Values
    "ValueCodec",
    # Introspection
    "Association",
    "SchemaColumn",
    "SchemaIntrospector",
    "SQLAlchemyIntrospector",
    "StaticIntrospector",
    "TableSchema",
    # Schema export
    "generate_columns",
    "generate_schema",
    # Config
    "AttrkitConfig",
    "ConfigError",
    "ConfigLoader",
    "DEFAULT_CONFIG",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "AttributeFault",
    "UnknownAttributeFault",
    "UnknownAttributeError",
    "RegistryFault",
    "RegistryFrozenFault",
    "IntrospectionFault",
]
