"""
attrkit Introspection - the read-only schema oracle contract.

A SchemaIntrospector answers, per model type: which physical columns
exist (in schema order, with type and default), which column is the
primary key, which associations point at other types through a foreign
key, and which instance-level members a type exposes.

Concrete introspectors only implement ``describe()``; the base class
memoizes the resulting ``TableSchema`` per type (schemas are assumed
stable once resolution starts) and derives every lookup from it.
``primary_key()`` is asked at declaration time, while models may still
be half-defined; introspectors that can answer it more cheaply than a
full ``describe()`` override it.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from ..descriptors import coerce_attr_type
from ..faults import IntrospectionFault

logger = logging.getLogger("attrkit.introspection")

__all__ = [
    "SchemaColumn",
    "Association",
    "TableSchema",
    "SchemaIntrospector",
    "StaticIntrospector",
    "model_label",
    "public_members",
]


def model_label(model: Any) -> str:
    """Human-readable identity of a model type for messages."""
    return getattr(model, "__qualname__", None) or getattr(model, "__name__", None) or repr(model)


def public_members(model: Any) -> FrozenSet[str]:
    """Instance-level readable member names of a class (no dunder/private)."""
    if not isinstance(model, type):
        return frozenset()
    return frozenset(name for name in dir(model) if not name.startswith("_"))


# ── Value Objects ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SchemaColumn:
    """One physical column as reported by the schema."""

    name: str
    type: Any
    default: Any = None
    primary_key: bool = False

    def __post_init__(self):
        object.__setattr__(self, "type", coerce_attr_type(self.type))


@dataclass(frozen=True)
class Association:
    """
    A foreign-key association from the owning type to ``target``.

    Attributes:
        name:        Association name (``role``).
        foreign_key: Local foreign-key column name (``role_id``).
        target:      Target model type.
        polymorphic: True when the target type is chosen per row; such
                     foreign keys stay plain columns.
    """

    name: str
    foreign_key: str
    target: Any
    polymorphic: bool = False


@dataclass(frozen=True)
class TableSchema:
    """Everything an introspector knows about one model type."""

    columns: Tuple[SchemaColumn, ...] = ()
    primary_key: Optional[str] = None
    associations: Tuple[Association, ...] = ()
    members: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "associations", tuple(self.associations))
        object.__setattr__(self, "members", frozenset(self.members))
        if self.primary_key is None:
            for column in self.columns:
                if column.primary_key:
                    object.__setattr__(self, "primary_key", column.name)
                    break

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns)


# ── Introspector Contract ────────────────────────────────────────────────

class SchemaIntrospector(ABC):
    """
    Abstract schema oracle.

    Subclasses implement ``describe(model)``. Unknown types must raise
    ``IntrospectionFault``.
    """

    def __init__(self):
        self._schemas: Dict[Any, TableSchema] = {}
        self._lock = threading.Lock()

    @abstractmethod
    def describe(self, model: Any) -> TableSchema:
        """Build the TableSchema for ``model``."""
        ...

    def schema(self, model: Any) -> TableSchema:
        """Memoized ``describe()``."""
        cached = self._schemas.get(model)
        if cached is not None:
            return cached
        described = self.describe(model)
        with self._lock:
            cached = self._schemas.setdefault(model, described)
        logger.debug(
            "Described %s: %d columns, %d associations",
            model_label(model),
            len(described.columns),
            len(described.associations),
        )
        return cached

    def forget(self, model: Any = None) -> None:
        """Drop memoized schemas (all, or one type)."""
        with self._lock:
            if model is None:
                self._schemas.clear()
            else:
                self._schemas.pop(model, None)

    # ── Lookups ──────────────────────────────────────────────────────

    def columns(self, model: Any) -> Tuple[SchemaColumn, ...]:
        return self.schema(model).columns

    def column_names(self, model: Any) -> Tuple[str, ...]:
        return self.schema(model).column_names

    def column(self, model: Any, name: str) -> Optional[SchemaColumn]:
        for column in self.schema(model).columns:
            if column.name == name:
                return column
        return None

    def primary_key(self, model: Any) -> Optional[str]:
        return self.schema(model).primary_key

    def associations(self, model: Any) -> Tuple[Association, ...]:
        return self.schema(model).associations

    def association_for_column(self, model: Any, column: str) -> Optional[Association]:
        """The association whose foreign key is ``column``, if any."""
        for association in self.schema(model).associations:
            if association.foreign_key == column:
                return association
        return None

    def member_names(self, model: Any) -> FrozenSet[str]:
        return self.schema(model).members


# ── In-memory Introspector ───────────────────────────────────────────────

class StaticIntrospector(SchemaIntrospector):
    """
    Introspector over explicitly registered schemas.

    Suits plain Python record classes and tests::

        schemas = StaticIntrospector()
        schemas.define(
            Role,
            columns=[SchemaColumn("id", "integer", primary_key=True),
                     SchemaColumn("name", "string")],
        )
        schemas.define(
            User,
            columns=[...],
            associations=[Association("role", "role_id", Role)],
        )

    Members default to the class's public names plus its column names.
    """

    def __init__(self):
        super().__init__()
        self._definitions: Dict[Any, TableSchema] = {}

    def define(
        self,
        model: Any,
        columns: Iterable[SchemaColumn] = (),
        *,
        primary_key: Optional[str] = None,
        associations: Iterable[Association] = (),
        members: Optional[Iterable[str]] = None,
    ) -> TableSchema:
        columns = tuple(columns)
        if members is None:
            members = public_members(model) | {c.name for c in columns}
        table = TableSchema(
            columns=columns,
            primary_key=primary_key,
            associations=tuple(associations),
            members=frozenset(members),
        )
        self._definitions[model] = table
        self.forget(model)
        return table

    def describe(self, model: Any) -> TableSchema:
        try:
            return self._definitions[model]
        except KeyError:
            raise IntrospectionFault(model_label(model), "no schema defined") from None
