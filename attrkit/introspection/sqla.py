"""
attrkit SQLAlchemy Introspector - schema facts from mapped classes.

Reads a declaratively mapped class through ``sqlalchemy.inspect``:

* columns: ``Mapper.column_attrs`` in mapping order, named by
  attribute key (which may differ from the DB column name)
* types: SQLAlchemy type class, walked up its MRO against
  ``SQLALCHEMY_TYPE_TO_ATTR_TYPE``
* defaults: scalar Python-side ``default=`` values only
* primary key: first primary-key column of the mapper, answered
  without configuring relationships
* associations: many-to-one relationships with a single local column;
  ``relationship(..., info={"polymorphic": True})`` marks
  per-row target types

No database connection is needed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper, RelationshipDirection
from sqlalchemy.orm.exc import UnmappedColumnError

from ..descriptors import AttrType
from ..faults import IntrospectionFault
from .base import (
    Association,
    SchemaColumn,
    SchemaIntrospector,
    TableSchema,
    model_label,
    public_members,
)

logger = logging.getLogger("attrkit.introspection.sqla")

__all__ = ["SQLAlchemyIntrospector", "SQLALCHEMY_TYPE_TO_ATTR_TYPE", "attr_type_for"]


# ── Type Mapping ─────────────────────────────────────────────────────────

SQLALCHEMY_TYPE_TO_ATTR_TYPE: Dict[str, AttrType] = {
    # Text
    "String": AttrType.STRING,
    "Text": AttrType.STRING,
    "Unicode": AttrType.STRING,
    "UnicodeText": AttrType.STRING,
    "Enum": AttrType.STRING,
    # Numeric
    "Integer": AttrType.INTEGER,
    "BigInteger": AttrType.INTEGER,
    "SmallInteger": AttrType.INTEGER,
    "Float": AttrType.FLOAT,
    "Double": AttrType.FLOAT,
    "Numeric": AttrType.DECIMAL,
    # Boolean
    "Boolean": AttrType.BOOLEAN,
    # Date/Time
    "DateTime": AttrType.DATETIME,
    "Date": AttrType.DATE,
    "Time": AttrType.TIME,
    "Interval": AttrType.DURATION,
    # Structured
    "JSON": AttrType.JSON,
    "ARRAY": AttrType.JSON,
    "PickleType": AttrType.BINARY,
    "Uuid": AttrType.UUID,
    "UUID": AttrType.UUID,
    # Binary
    "LargeBinary": AttrType.BINARY,
}


def attr_type_for(sa_type: Any) -> AttrType:
    """Map a SQLAlchemy type instance to an AttrType (string if unknown)."""
    for klass in type(sa_type).__mro__:
        mapped = SQLALCHEMY_TYPE_TO_ATTR_TYPE.get(klass.__name__)
        if mapped is not None:
            return mapped
    logger.debug("No attribute type for %s, using string", type(sa_type).__name__)
    return AttrType.STRING


def _scalar_default(column: Any) -> Any:
    default = getattr(column, "default", None)
    if default is not None and getattr(default, "is_scalar", False):
        return default.arg
    return None


# ── Introspector ─────────────────────────────────────────────────────────

class SQLAlchemyIntrospector(SchemaIntrospector):
    """Introspector for SQLAlchemy declaratively mapped classes."""

    def describe(self, model: Any) -> TableSchema:
        mapper = self._mapper(model)

        columns: List[SchemaColumn] = []
        for prop in mapper.column_attrs:
            column = prop.columns[0]
            columns.append(
                SchemaColumn(
                    name=prop.key,
                    type=attr_type_for(column.type),
                    default=_scalar_default(column),
                    primary_key=bool(column.primary_key),
                )
            )

        return TableSchema(
            columns=tuple(columns),
            primary_key=self._primary_key(mapper),
            associations=tuple(self._associations(mapper)),
            members=public_members(model) | {c.name for c in columns},
        )

    def primary_key(self, model: Any) -> Optional[str]:
        """
        Primary key read off the mapper alone.

        Declarations ask for it while classes are still being defined,
        so this must not touch relationships (which configures every
        mapper in the registry) nor memoize a schema that later
        mappers would extend.
        """
        cached = self._schemas.get(model)
        if cached is not None:
            return cached.primary_key
        return self._primary_key(self._mapper(model))

    def _mapper(self, model: Any) -> Mapper:
        try:
            mapper = sa_inspect(model)
        except NoInspectionAvailable:
            raise IntrospectionFault(model_label(model), "not a mapped SQLAlchemy class") from None
        if not isinstance(mapper, Mapper):
            raise IntrospectionFault(model_label(model), "not a mapped SQLAlchemy class")
        return mapper

    def _primary_key(self, mapper: Mapper) -> Optional[str]:
        pk_columns = list(mapper.primary_key)
        if not pk_columns:
            return None
        if len(pk_columns) > 1:
            logger.debug(
                "Composite primary key on %s, using first column",
                model_label(mapper.class_),
            )
        return self._attr_key(mapper, pk_columns[0])

    def _associations(self, mapper: Mapper) -> List[Association]:
        associations: List[Association] = []
        for rel in mapper.relationships:
            if rel.direction is not RelationshipDirection.MANYTOONE:
                continue
            local = list(rel.local_columns)
            if len(local) != 1:
                logger.debug("Skipping relationship %s: %d local columns", rel.key, len(local))
                continue
            foreign_key = self._attr_key(mapper, local[0])
            if foreign_key is None:
                continue
            associations.append(
                Association(
                    name=rel.key,
                    foreign_key=foreign_key,
                    target=rel.mapper.class_,
                    polymorphic=bool(rel.info.get("polymorphic", False)),
                )
            )
        return associations

    @staticmethod
    def _attr_key(mapper: Mapper, column: Any) -> Optional[str]:
        try:
            return mapper.get_property_by_column(column).key
        except UnmappedColumnError:
            logger.debug("Column %s is not mapped on %s", column, model_label(mapper.class_))
            return None
