"""
attrkit Introspection - schema oracles consumed by the resolver.
"""

from .base import (
    Association,
    SchemaColumn,
    SchemaIntrospector,
    StaticIntrospector,
    TableSchema,
    model_label,
    public_members,
)
from .sqla import SQLALCHEMY_TYPE_TO_ATTR_TYPE, SQLAlchemyIntrospector, attr_type_for

__all__ = [
    "Association",
    "SchemaColumn",
    "SchemaIntrospector",
    "StaticIntrospector",
    "TableSchema",
    "model_label",
    "public_members",
    "SQLAlchemyIntrospector",
    "SQLALCHEMY_TYPE_TO_ATTR_TYPE",
    "attr_type_for",
]
