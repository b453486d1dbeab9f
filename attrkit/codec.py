"""
attrkit Value Codec - reads and writes record values by descriptor.

Turns a record into the row shape grid and form layers emit:

    codec = ValueCodec()
    codec.to_sequence(user, descriptors)   # [1, "a@b.c", "admin", ...]
    codec.to_mapping(user, descriptors)    # {"id": 1, "email": "a@b.c", ...}

Descriptors flagged ``included=False`` are skipped by both. Errors
raised while reading (a failing getter, a missing member) propagate
to the caller unchanged. Writing an attribute that has no setter and
no writable member is a silent no-op.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Union

from .config import AttrkitConfig, DEFAULT_CONFIG
from .descriptors import AttributeDescriptor

logger = logging.getLogger("attrkit.codec")

__all__ = ["ValueCodec", "DescriptorsLike"]


DescriptorsLike = Union[Iterable[Any], Mapping]


class ValueCodec:
    """Per-record value access driven by descriptors."""

    def __init__(self, config: AttrkitConfig = DEFAULT_CONFIG):
        self.config = config

    # ── Single Values ────────────────────────────────────────────────

    def value_for(self, descriptor: Any, record: Any) -> Any:
        """
        Read one value.

        Timezone-aware datetimes come back as wall-clock strings in
        their own zone (``config.datetime_format``), so JSON encoders
        downstream cannot shift them into another zone.
        """
        descriptor = self._coerce(descriptor)
        value = descriptor.accessor.read(record)
        if isinstance(value, datetime.datetime) and value.utcoffset() is not None:
            value = value.strftime(self.config.datetime_format)
        return value

    def set_value(self, descriptor: Any, record: Any, value: Any) -> bool:
        """Write one value; returns False when nothing could be written."""
        descriptor = self._coerce(descriptor)
        written = descriptor.accessor.write(record, value)
        if not written:
            logger.debug("No write target for '%s' on %s", descriptor.name, type(record).__name__)
        return written

    # ── Records ──────────────────────────────────────────────────────

    def to_sequence(self, record: Any, descriptors: DescriptorsLike) -> List[Any]:
        """Values of included descriptors, in descriptor order."""
        return [
            self.value_for(descriptor, record)
            for descriptor in self._iter(descriptors)
            if descriptor.included
        ]

    def to_mapping(self, record: Any, descriptors: DescriptorsLike) -> Dict[str, Any]:
        """Values of included descriptors keyed by name."""
        return {
            descriptor.name: self.value_for(descriptor, record)
            for descriptor in self._iter(descriptors)
            if descriptor.included
        }

    def update_from_mapping(
        self,
        record: Any,
        descriptors: DescriptorsLike,
        values: Mapping,
    ) -> List[str]:
        """
        Write every descriptor whose name appears in ``values``.

        A value may be given raw or wrapped as ``{"value": raw, ...}``
        (the shape form layers post back). Keys matching no descriptor
        are ignored. Returns the names actually written.
        """
        written: List[str] = []
        for descriptor in self._iter(descriptors):
            if descriptor.name not in values:
                continue
            value = values[descriptor.name]
            if isinstance(value, Mapping) and "value" in value:
                value = value["value"]
            if self.set_value(descriptor, record, value):
                written.append(descriptor.name)
        return written

    # ── Internals ────────────────────────────────────────────────────

    def _iter(self, descriptors: DescriptorsLike):
        items = descriptors.values() if isinstance(descriptors, Mapping) else descriptors
        for descriptor in items:
            yield self._coerce(descriptor)

    def _coerce(self, descriptor: Any) -> AttributeDescriptor:
        if isinstance(descriptor, AttributeDescriptor):
            return descriptor
        if isinstance(descriptor, Mapping):
            return AttributeDescriptor.from_mapping(
                descriptor,
                separator=self.config.association_separator,
                default_attr_type=self.config.default_attr_type,
            )
        raise TypeError(f"Expected an AttributeDescriptor or mapping, got {type(descriptor).__name__}")
