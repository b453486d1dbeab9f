"""
attrkit Attribute Resolver - the merge of declarations and schema.

Produces the ordered descriptor list for a model type from three
sources: registry declarations, physical columns, and associations.
Declarations always win key-by-key over schema-derived values.

Two orderings:

* **forced** (the type has an exposure list): exactly the exposed
  names, in exposure order;
* **natural**: schema column order, foreign keys replaced in place by
  their association attribute (``role_id`` → ``role__name``), then
  declared-only attributes in declaration order, minus exclusions.

Resolution is pure. Once the registry is frozen, results are cached per
type until ``invalidate()`` is called.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from .config import AttrkitConfig, DEFAULT_CONFIG
from .descriptors import AttributeDescriptor
from .faults import UnknownAttributeFault
from .introspection.base import SchemaColumn, SchemaIntrospector, model_label
from .naming import AssociationNameResolver, is_association_attr
from .registry import AttributeRegistry

logger = logging.getLogger("attrkit.resolver")

__all__ = ["AttributeResolver"]


class AttributeResolver:
    """
    Resolves model types into tuples of ``AttributeDescriptor``.

    Usage::

        resolver = AttributeResolver(registry)
        for descriptor in resolver.resolve(User):
            print(descriptor.name, descriptor.attr_type)

    Args:
        registry: Declaration state.
        introspector: Schema oracle (defaults to the registry's).
        config: Separator, display candidates, default type, caching.
    """

    def __init__(
        self,
        registry: AttributeRegistry,
        introspector: Optional[SchemaIntrospector] = None,
        config: AttrkitConfig = DEFAULT_CONFIG,
    ):
        self.registry = registry
        self.introspector = introspector or registry.introspector
        if self.introspector is None:
            raise ValueError("AttributeResolver needs a SchemaIntrospector")
        self.config = config
        self.association_names = AssociationNameResolver(self.introspector, config)
        self._cache: Dict[Any, Tuple[AttributeDescriptor, ...]] = {}
        self._lock = threading.Lock()

    # ── Public API ───────────────────────────────────────────────────

    def resolve(self, model: Any) -> Tuple[AttributeDescriptor, ...]:
        """The ordered, name-unique descriptors for ``model``."""
        cacheable = self.config.cache_resolved and self.registry.frozen
        if cacheable:
            cached = self._cache.get(model)
            if cached is not None:
                return cached

        exposed = self.registry.exposed(model)
        if exposed is not None:
            attrs = self._forced_order(model, exposed)
            mode = "forced"
        else:
            attrs = self._natural_order(model)
            mode = "natural"

        descriptors = tuple(self._build(attr) for attr in self._unique(model, attrs))
        logger.debug(
            "Resolved %s in %s order: %s",
            model_label(model),
            mode,
            [d.name for d in descriptors],
        )

        if cacheable:
            with self._lock:
                descriptors = self._cache.setdefault(model, descriptors)
        return descriptors

    def descriptor(self, model: Any, name: str) -> AttributeDescriptor:
        """Look up one resolved descriptor by name."""
        for descriptor in self.resolve(model):
            if descriptor.name == name:
                return descriptor
        raise UnknownAttributeFault(name, model_label(model))

    def names(self, model: Any) -> Tuple[str, ...]:
        return tuple(d.name for d in self.resolve(model))

    def invalidate(self, model: Any = None) -> None:
        """Drop cached results (all types, or one)."""
        with self._lock:
            if model is None:
                self._cache.clear()
            else:
                self._cache.pop(model, None)
        logger.debug("Invalidated resolved attributes for %s", model_label(model) if model is not None else "all models")

    # ── Forced Order ─────────────────────────────────────────────────

    def _forced_order(self, model: Any, exposed: Tuple[str, ...]) -> List[Dict[str, Any]]:
        attrs: List[Dict[str, Any]] = []
        for name in exposed:
            declared = dict(self.registry.declaration(model, name) or {})
            column = self.introspector.column(model, name)

            if column is not None:
                merged = {
                    "name": name,
                    "attr_type": column.type,
                    "default_value": column.default,
                }
                merged.update(declared)
            elif is_association_attr(name, self.config.association_separator):
                merged = {"name": name}
                association_type = self._association_type(model, name)
                if association_type is not None:
                    merged["attr_type"] = association_type
                merged.update(declared)
                merged["name"] = name
            else:
                merged = {**declared, "virtual": True}

            if not merged.get("name"):
                raise UnknownAttributeFault(name, model_label(model))
            attrs.append(merged)
        return attrs

    def _association_type(self, model: Any, name: str) -> Any:
        """Type of ``<assoc><sep><field>`` when both ends are known."""
        association_name, _, field = name.partition(self.config.association_separator)
        for association in self.introspector.associations(model):
            if association.name == association_name and not association.polymorphic:
                target_column = self.introspector.column(association.target, field)
                return target_column.type if target_column is not None else None
        return None

    # ── Natural Order ────────────────────────────────────────────────

    def _natural_order(self, model: Any) -> List[Dict[str, Any]]:
        pending = [dict(d) for d in self.registry.declared(model)]
        attrs: List[Dict[str, Any]] = []

        for column in self.introspector.columns(model):
            attr: Dict[str, Any] = {"name": column.name, "attr_type": column.type}

            association = self.introspector.association_for_column(model, column.name)
            if association is not None and not association.polymorphic:
                attr["name"], attr["attr_type"] = self.association_names.resolve(column, association)

            if column.default is not None:
                attr["default_value"] = column.default

            declared = _take(pending, attr["name"])
            if declared is not None:
                attr.update(declared)
            attrs.append(attr)

        for declared in pending:
            attrs.append(self._declared_only(model, declared))

        excluded = set(self.registry.excluded(model))
        return [attr for attr in attrs if attr["name"] not in excluded]

    def _declared_only(self, model: Any, declared: Dict[str, Any]) -> Dict[str, Any]:
        """A declaration no column claimed (virtual, association, or a raw FK)."""
        name = declared["name"]
        column: Optional[SchemaColumn] = self.introspector.column(model, name)
        if column is not None:
            attr: Dict[str, Any] = {"name": name, "attr_type": column.type}
            if column.default is not None:
                attr["default_value"] = column.default
        elif is_association_attr(name, self.config.association_separator):
            attr = {"name": name}
            association_type = self._association_type(model, name)
            if association_type is not None:
                attr["attr_type"] = association_type
        else:
            attr = {"name": name, "virtual": True}
        attr.update(declared)
        return attr

    # ── Helpers ──────────────────────────────────────────────────────

    def _unique(self, model: Any, attrs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        seen = set()
        unique: List[Dict[str, Any]] = []
        for attr in attrs:
            if attr["name"] in seen:
                logger.warning(
                    "Dropping duplicate attribute '%s' on %s",
                    attr["name"],
                    model_label(model),
                )
                continue
            seen.add(attr["name"])
            unique.append(attr)
        return unique

    def _build(self, attr: Dict[str, Any]) -> AttributeDescriptor:
        return AttributeDescriptor.from_mapping(
            attr,
            separator=self.config.association_separator,
            default_attr_type=self.config.default_attr_type,
        )


def _take(pending: List[Dict[str, Any]], name: str) -> Optional[Dict[str, Any]]:
    for index, declared in enumerate(pending):
        if declared["name"] == name:
            return pending.pop(index)
    return None
