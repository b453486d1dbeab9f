"""
attrkit Naming - association attribute names.

A non-polymorphic foreign-key column (``role_id``) is shown to the
world as a readable field of the associated type (``role__name``).
The display field is picked by probing the target type for the first
of ``name``, ``title``, ``label`` (configurable), then the foreign-key
column name itself.

Association-ness of a bare attribute name is a convention: any name
containing the separator is treated as association-shaped. The
predicate lives here alone so the policy can change without touching
the merge logic.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from .config import AttrkitConfig, DEFAULT_CONFIG
from .descriptors import AttrType
from .introspection.base import Association, SchemaColumn, SchemaIntrospector, model_label

logger = logging.getLogger("attrkit.naming")

__all__ = [
    "ASSOCIATION_SEPARATOR",
    "is_association_attr",
    "association_attr_name",
    "AssociationNameResolver",
]


ASSOCIATION_SEPARATOR = DEFAULT_CONFIG.association_separator


def is_association_attr(name: str, separator: str = ASSOCIATION_SEPARATOR) -> bool:
    """True if ``name`` looks like ``<association><sep><field>``."""
    return bool(name) and separator in name


def association_attr_name(
    association: str,
    field: str,
    separator: str = ASSOCIATION_SEPARATOR,
) -> str:
    return f"{association}{separator}{field}"


class AssociationNameResolver:
    """
    Derives ``(display_name, display_type)`` for a foreign-key column.

    The display type is the target column's type when the chosen field
    is a physical column of the target, else ``string`` (the field is a
    computed member). This fallback is never an error.
    """

    def __init__(
        self,
        introspector: SchemaIntrospector,
        config: AttrkitConfig = DEFAULT_CONFIG,
    ):
        self.introspector = introspector
        self.config = config

    def display_field(self, association: Association) -> Optional[str]:
        """First candidate present on the target type, or None."""
        target = association.target
        available = self.introspector.member_names(target) | set(
            self.introspector.column_names(target)
        )
        candidates = tuple(self.config.display_candidates) + (association.foreign_key,)
        for candidate in candidates:
            if candidate in available:
                return candidate
        return None

    def resolve(
        self,
        column: SchemaColumn,
        association: Association,
    ) -> Tuple[str, Any]:
        """
        Resolve the display name and type for ``column``.

        When the target exposes none of the candidates the column keeps
        its raw name and type.
        """
        field = self.display_field(association)
        if field is None:
            logger.warning(
                "No display field on %s for association '%s'; keeping column '%s'",
                model_label(association.target),
                association.name,
                column.name,
            )
            return column.name, column.type

        target_column = self.introspector.column(association.target, field)
        if target_column is not None:
            display_type = target_column.type
        else:
            logger.debug(
                "'%s' on %s is not a column, typing '%s' as string",
                field,
                model_label(association.target),
                association.name,
            )
            display_type = AttrType.STRING

        name = association_attr_name(association.name, field, self.config.association_separator)
        return name, display_type
