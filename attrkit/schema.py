"""
attrkit Schema - descriptor lists in shapes UI builders consume.

``generate_columns`` feeds grid/form builders; ``generate_schema``
emits a JSON Schema object whose ``properties`` keep descriptor order.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .descriptors import AttributeDescriptor, AttrType
from .introspection.base import model_label

__all__ = ["generate_columns", "generate_schema", "ATTR_TYPE_TO_JSON_SCHEMA"]


ATTR_TYPE_TO_JSON_SCHEMA: Dict[str, Dict[str, Any]] = {
    AttrType.STRING.value: {"type": "string"},
    AttrType.BOOLEAN.value: {"type": "boolean"},
    AttrType.INTEGER.value: {"type": "integer"},
    AttrType.FLOAT.value: {"type": "number"},
    AttrType.DECIMAL.value: {"type": "string", "format": "decimal"},
    AttrType.DATE.value: {"type": "string", "format": "date"},
    AttrType.TIME.value: {"type": "string", "format": "time"},
    AttrType.DATETIME.value: {"type": "string", "format": "date-time"},
    AttrType.DURATION.value: {"type": "string", "format": "duration"},
    AttrType.JSON.value: {},
    AttrType.UUID.value: {"type": "string", "format": "uuid"},
    AttrType.BINARY.value: {"type": "string", "format": "binary"},
}


def generate_columns(descriptors: Iterable[AttributeDescriptor]) -> List[Dict[str, Any]]:
    """One plain dict per descriptor, in order (callables dropped)."""
    return [descriptor.to_dict() for descriptor in descriptors]


def generate_schema(model: Any, descriptors: Iterable[AttributeDescriptor]) -> Dict[str, Any]:
    """
    Generate a JSON Schema for a resolved descriptor list.

    Args:
        model: The model type (used for ``title``)
        descriptors: Resolved descriptors, in display order

    Returns:
        JSON Schema dict
    """
    properties: Dict[str, Any] = {}
    for descriptor in descriptors:
        prop = dict(ATTR_TYPE_TO_JSON_SCHEMA.get(str(descriptor.attr_type), {"type": "string"}))
        label = descriptor.options.get("label")
        if label:
            prop["title"] = label
        if descriptor.default_value is not None:
            prop["default"] = descriptor.default_value
        if descriptor.read_only or (descriptor.virtual and descriptor.setter is None):
            prop["readOnly"] = True
        properties[descriptor.name] = prop

    return {
        "title": model_label(model),
        "type": "object",
        "properties": properties,
    }
