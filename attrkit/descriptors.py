"""
attrkit Descriptors - the resolved, UI-facing shape of one attribute.

An AttributeDescriptor is what grid and form builders consume: the
attribute's name, type, default, flags, presentation options, and a
ValueAccessor that reads and writes the value on a record.

Descriptors are immutable. Resolution builds a fresh tuple of them, so
a resolved list can be cached and shared across threads.
"""

from __future__ import annotations

import datetime
import decimal
import inspect
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional, Tuple


__all__ = [
    "AttrType",
    "AttributeDescriptor",
    "ValueAccessor",
    "coerce_attr_type",
    "DESCRIPTOR_FIELDS",
]


# ── Attribute Types ──────────────────────────────────────────────────────

class AttrType(str, Enum):
    """
    Known attribute types.

    The set is open-ended: unknown type names are carried through as
    plain strings, so ``attr_type`` compares equal to its name either way.
    """

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    DURATION = "duration"
    JSON = "json"
    UUID = "uuid"
    BINARY = "binary"

    def __str__(self) -> str:
        return self.value


PYTHON_TYPE_TO_ATTR_TYPE: Dict[type, AttrType] = {
    str: AttrType.STRING,
    bool: AttrType.BOOLEAN,
    int: AttrType.INTEGER,
    float: AttrType.FLOAT,
    decimal.Decimal: AttrType.DECIMAL,
    datetime.datetime: AttrType.DATETIME,
    datetime.date: AttrType.DATE,
    datetime.time: AttrType.TIME,
    datetime.timedelta: AttrType.DURATION,
    dict: AttrType.JSON,
    list: AttrType.JSON,
    uuid.UUID: AttrType.UUID,
    bytes: AttrType.BINARY,
}


def coerce_attr_type(value: Any) -> Any:
    """
    Normalize a declared or introspected type.

    Accepts an ``AttrType``, a type name (``"boolean"``), or a Python
    type (``bool``). Names outside the known set pass through unchanged.
    """
    if value is None or isinstance(value, AttrType):
        return value
    if isinstance(value, type):
        mapped = PYTHON_TYPE_TO_ATTR_TYPE.get(value)
        if mapped is None:
            raise TypeError(f"No attribute type for Python type {value.__name__}")
        return mapped
    name = str(value).lower()
    try:
        return AttrType(name)
    except ValueError:
        return name


# ── Value Accessor ───────────────────────────────────────────────────────

_MISSING = object()


class ValueAccessor:
    """
    Reads and writes one attribute on a record.

    Built once per descriptor. A custom ``getter(record)`` or
    ``setter(record, value)`` wins over named-member access; each side
    falls back independently.

    Named reads handle association-shaped names: ``role__name`` reads
    ``record.role__name`` when the record has such a member, otherwise
    walks ``record.role.name`` and yields None at the first None hop.
    Mapping records are read and written by key.
    """

    __slots__ = ("name", "getter", "setter", "path")

    def __init__(
        self,
        name: str,
        *,
        getter: Optional[Callable[[Any], Any]] = None,
        setter: Optional[Callable[[Any, Any], Any]] = None,
        separator: str = "__",
    ):
        self.name = name
        self.getter = getter
        self.setter = setter
        parts = tuple(name.split(separator)) if name and separator else ()
        self.path: Tuple[str, ...] = parts if len(parts) > 1 and all(parts) else ()

    # ── Read ─────────────────────────────────────────────────────────

    def read(self, record: Any) -> Any:
        if self.getter is not None:
            return self.getter(record)
        if not self.name:
            return None

        if isinstance(record, Mapping):
            return record.get(self.name)

        if self.path and not hasattr(record, self.name):
            obj = record
            for part in self.path:
                if obj is None:
                    return None
                obj = obj.get(part) if isinstance(obj, Mapping) else getattr(obj, part)
            return obj

        return getattr(record, self.name)

    # ── Write ────────────────────────────────────────────────────────

    def write(self, record: Any, value: Any) -> bool:
        """Write ``value``; returns False when there is no target."""
        if self.setter is not None:
            self.setter(record, value)
            return True
        if not self.name:
            return False

        if isinstance(record, Mapping):
            if self.name in record and hasattr(record, "__setitem__"):
                record[self.name] = value
                return True
            return False

        if _has_writer(record, self.name):
            setattr(record, self.name, value)
            return True
        return False

    def __repr__(self) -> str:
        custom = "custom" if self.getter or self.setter else "named"
        return f"<ValueAccessor '{self.name}' ({custom})>"


def _has_writer(record: Any, name: str) -> bool:
    """True if ``record.name = value`` targets an existing attribute."""
    attr = inspect.getattr_static(type(record), name, _MISSING)
    if attr is _MISSING:
        instance_dict = getattr(record, "__dict__", None)
        return instance_dict is not None and name in instance_dict
    if isinstance(attr, property):
        return attr.fset is not None
    if inspect.isfunction(attr) or isinstance(attr, (staticmethod, classmethod)):
        return False
    if hasattr(type(attr), "__get__") and not hasattr(type(attr), "__set__"):
        return False
    return True


# ── Descriptor ───────────────────────────────────────────────────────────

DESCRIPTOR_FIELDS = frozenset({
    "name",
    "attr_type",
    "default_value",
    "virtual",
    "included",
    "getter",
    "setter",
})


@dataclass(frozen=True)
class AttributeDescriptor:
    """
    One resolved attribute.

    Attributes:
        name:          Unique within a resolved list.
        attr_type:     ``AttrType`` member, or an unknown type name.
        default_value: Schema or declared default (None when absent).
        virtual:       Backed by neither a column nor an association.
        included:      False keeps the attribute listed but out of
                       ``to_sequence`` / ``to_mapping`` output.
        getter/setter: Optional custom accessors.
        options:       Presentation options (``read_only``, ``label``, …),
                       carried through untouched.
    """

    name: str
    attr_type: Any = AttrType.STRING
    default_value: Any = None
    virtual: bool = False
    included: bool = True
    getter: Optional[Callable[[Any], Any]] = None
    setter: Optional[Callable[[Any, Any], Any]] = None
    options: Mapping = field(default_factory=lambda: MappingProxyType({}))
    accessor: ValueAccessor = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.options, MappingProxyType):
            object.__setattr__(self, "options", MappingProxyType(dict(self.options)))
        if self.accessor is None:
            object.__setattr__(
                self,
                "accessor",
                ValueAccessor(self.name, getter=self.getter, setter=self.setter),
            )

    def __hash__(self) -> int:
        # options and default_value may hold unhashable values
        return hash((self.name, str(self.attr_type)))

    @classmethod
    def from_mapping(
        cls,
        data: Mapping,
        *,
        separator: str = "__",
        default_attr_type: Any = AttrType.STRING,
    ) -> AttributeDescriptor:
        """
        Build a descriptor from a merged attribute mapping.

        Known keys fill the dataclass fields; every other key lands in
        ``options``.
        """
        known = {k: v for k, v in data.items() if k in DESCRIPTOR_FIELDS}
        options = {k: v for k, v in data.items() if k not in DESCRIPTOR_FIELDS}

        name = known.get("name")
        if not name:
            raise ValueError("Attribute mapping has no name")
        attr_type = coerce_attr_type(known.get("attr_type")) or coerce_attr_type(default_attr_type)

        return cls(
            name=name,
            attr_type=attr_type,
            default_value=known.get("default_value"),
            virtual=bool(known.get("virtual", False)),
            included=known.get("included", True) is not False,
            getter=known.get("getter"),
            setter=known.get("setter"),
            options=options,
            accessor=ValueAccessor(
                name,
                getter=known.get("getter"),
                setter=known.get("setter"),
                separator=separator,
            ),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a field or presentation option by key."""
        if key in DESCRIPTOR_FIELDS:
            return getattr(self, key)
        return self.options.get(key, default)

    def __getitem__(self, key: str) -> Any:
        if key in DESCRIPTOR_FIELDS:
            return getattr(self, key)
        return self.options[key]

    @property
    def read_only(self) -> bool:
        return bool(self.options.get("read_only", False))

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping for UI consumers; callables are omitted."""
        data: Dict[str, Any] = {
            "name": self.name,
            "attr_type": str(self.attr_type),
            "virtual": self.virtual,
            "included": self.included,
        }
        if self.default_value is not None:
            data["default_value"] = self.default_value
        for key, value in self.options.items():
            if not callable(value):
                data[key] = value
        return data
