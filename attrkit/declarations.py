"""
attrkit Declarations - the model-author surface.

Class decorators applied where a model is defined::

    @attribute("full_name", getter=lambda u: f"{u.first_name} {u.last_name}")
    @attribute("active", type="boolean", read_only=True)
    @exclude_attributes("crypted_password", "updated_at")
    class User(Base):
        __tablename__ = "users"
        ...

Decorators apply bottom-up, so list the attributes you want declared
first at the bottom. Each one writes to ``default_registry`` unless a
``registry=`` is passed, and returns the class unchanged.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from .introspection.sqla import SQLAlchemyIntrospector
from .registry import AttributeRegistry

__all__ = [
    "default_registry",
    "attribute",
    "exclude_attributes",
    "expose_attributes",
]

T = TypeVar("T", bound=type)

default_registry = AttributeRegistry(SQLAlchemyIntrospector())


def attribute(
    name: str,
    *,
    registry: Optional[AttributeRegistry] = None,
    **options: Any,
) -> Callable[[T], T]:
    """Declare or configure an attribute (``type=`` sets ``attr_type``)."""
    def decorator(cls: T) -> T:
        (registry or default_registry).declare(cls, name, **options)
        return cls
    return decorator


def exclude_attributes(
    *names: str,
    registry: Optional[AttributeRegistry] = None,
) -> Callable[[T], T]:
    """Keep attributes out of natural-order resolution."""
    def decorator(cls: T) -> T:
        (registry or default_registry).exclude(cls, *names)
        return cls
    return decorator


def expose_attributes(
    *names: str,
    registry: Optional[AttributeRegistry] = None,
) -> Callable[[T], T]:
    """Resolve exactly these attributes, in this order (wins over exclusion)."""
    def decorator(cls: T) -> T:
        (registry or default_registry).expose(cls, *names)
        return cls
    return decorator
