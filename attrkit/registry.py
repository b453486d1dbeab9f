"""
attrkit Attribute Registry - per-type declaration state.

For every model type the registry keeps:

* declared attributes, in declaration order (primary key first),
* an optional exclusion list,
* an optional exposure list (forced membership and order).

Registry state is written while models are defined and read by the
resolver afterwards. ``freeze()`` marks the end of that boot phase; any
later mutation raises ``RegistryFrozenFault``.

Inheritance is explicit: ``register(Sub)`` copies the nearest registered
ancestor's state underneath ``Sub``'s own. Register (or declare on)
parents before children.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .descriptors import coerce_attr_type
from .faults import RegistryFrozenFault
from .introspection.base import SchemaIntrospector, model_label

logger = logging.getLogger("attrkit.registry")

__all__ = ["AttributeRegistry"]


@dataclass
class _Entry:
    """Mutable registry state for one model type."""

    declared: List[Dict[str, Any]] = field(default_factory=list)
    excluded: Optional[List[str]] = None
    exposed: Optional[List[str]] = None

    def copy(self) -> _Entry:
        return _Entry(
            declared=[dict(d) for d in self.declared],
            excluded=list(self.excluded) if self.excluded is not None else None,
            exposed=list(self.exposed) if self.exposed is not None else None,
        )

    def find(self, name: str) -> Optional[Dict[str, Any]]:
        for declared in self.declared:
            if declared["name"] == name:
                return declared
        return None


_EMPTY = _Entry()


class AttributeRegistry:
    """
    Process-wide store of attribute declarations, keyed by model type.

    Usage::

        registry = AttributeRegistry(SQLAlchemyIntrospector())
        registry.declare(User, "full_name", getter=lambda u: f"{u.first} {u.last}")
        registry.declare(User, "active", type="boolean", read_only=True)
        registry.exclude(User, "crypted_password")
        registry.freeze()

    Args:
        introspector: Schema oracle used to find each type's primary key
            (declaring the primary key puts it first; exposing without
            it inserts it).
    """

    def __init__(self, introspector: Optional[SchemaIntrospector] = None):
        self.introspector = introspector
        self._entries: Dict[Any, _Entry] = {}
        self._frozen = False
        self._lock = threading.RLock()

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the boot phase; the registry becomes read-only."""
        self._frozen = True
        logger.debug("Attribute registry frozen with %d models", len(self._entries))

    def clear(self) -> None:
        """Drop every entry (administrative; refused once frozen)."""
        self._check_writable("clear")
        with self._lock:
            self._entries.clear()

    def models(self) -> Tuple[Any, ...]:
        """Registered model types, in registration order."""
        return tuple(self._entries)

    def is_registered(self, model: Any) -> bool:
        return model in self._entries

    def register(self, model: Any) -> None:
        """
        Create ``model``'s entry, inheriting from its nearest registered
        ancestor. Idempotent.
        """
        if model in self._entries:
            return
        self._check_writable("register", model)
        with self._lock:
            if model in self._entries:
                return
            parent = self._ancestor_entry(model)
            self._entries[model] = parent.copy() if parent is not None else _Entry()
        logger.debug(
            "Registered %s%s",
            model_label(model),
            " (inherited)" if parent is not None else "",
        )

    # ── Mutation ─────────────────────────────────────────────────────

    def declare(self, model: Any, name: str, **options: Any) -> None:
        """
        Declare or reconfigure an attribute.

        ``type`` becomes ``attr_type``; every other option is stored
        as-is. Re-declaring a name merges the new options into the
        existing declaration. A new declaration of the primary key goes
        first, anything else is appended.
        """
        self._check_writable("declare", model)
        name = str(name)
        if "type" in options:
            options["attr_type"] = coerce_attr_type(options.pop("type"))
        elif "attr_type" in options:
            options["attr_type"] = coerce_attr_type(options["attr_type"])
        options.pop("name", None)

        self.register(model)
        with self._lock:
            entry = self._entries[model]
            existing = entry.find(name)
            if existing is not None:
                existing.update(options)
            elif name == self._primary_key(model):
                entry.declared.insert(0, {"name": name, **options})
            else:
                entry.declared.append({"name": name, **options})
        logger.debug("Declared %s.%s %s", model_label(model), name, sorted(options))

    def exclude(self, model: Any, *names: str) -> None:
        """Replace the exclusion list (ignored while exposure is set)."""
        self._check_writable("exclude", model)
        self.register(model)
        with self._lock:
            self._entries[model].excluded = [str(n) for n in names]

    def expose(self, model: Any, *names: str) -> None:
        """
        Replace the exposure list.

        If the primary key is missing it is inserted first and declared
        (when not declared already).
        """
        self._check_writable("expose", model)
        exposed = [str(n) for n in names]
        pk = self._primary_key(model)

        self.register(model)
        if pk is not None and pk not in exposed:
            exposed.insert(0, pk)
            if self._entries[model].find(pk) is None:
                self.declare(model, pk)
        with self._lock:
            self._entries[model].exposed = exposed

    # ── Read Accessors ───────────────────────────────────────────────

    def declared(self, model: Any) -> Tuple[Mapping[str, Any], ...]:
        """Declarations in order, as read-only mappings."""
        return tuple(MappingProxyType(dict(d)) for d in self._lookup(model).declared)

    def declaration(self, model: Any, name: str) -> Optional[Mapping[str, Any]]:
        found = self._lookup(model).find(name)
        return MappingProxyType(dict(found)) if found is not None else None

    def excluded(self, model: Any) -> Tuple[str, ...]:
        return tuple(self._lookup(model).excluded or ())

    def exposed(self, model: Any) -> Optional[Tuple[str, ...]]:
        """The exposure list, or None when the type has none."""
        exposed = self._lookup(model).exposed
        return tuple(exposed) if exposed is not None else None

    # ── Internals ────────────────────────────────────────────────────

    def _lookup(self, model: Any) -> _Entry:
        entry = self._entries.get(model)
        if entry is not None:
            return entry
        return self._ancestor_entry(model) or _EMPTY

    def _ancestor_entry(self, model: Any) -> Optional[_Entry]:
        for base in getattr(model, "__mro__", ())[1:]:
            entry = self._entries.get(base)
            if entry is not None:
                return entry
        return None

    def _primary_key(self, model: Any) -> Optional[str]:
        if self.introspector is None:
            return None
        return self.introspector.primary_key(model)

    def _check_writable(self, operation: str, model: Any = None) -> None:
        if self._frozen:
            raise RegistryFrozenFault(
                operation,
                model_label(model) if model is not None else None,
            )
