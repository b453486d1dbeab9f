"""
attrkit faults - concrete faults, one base per domain.
"""

from __future__ import annotations

from typing import Optional

from .core import Fault, FaultDomain


# ── Resolution ───────────────────────────────────────────────────────────

class AttributeFault(Fault):
    """Raised while resolving a model's attributes."""

    domain = FaultDomain.ATTRIBUTES


class UnknownAttributeFault(AttributeFault):
    """Name is neither declared, a column, nor association-shaped."""

    code = "UNKNOWN_ATTRIBUTE"

    def __init__(self, attribute: str, model: str):
        super().__init__(
            f"Unknown attribute '{attribute}' for model {model}",
            metadata={"attribute": attribute, "model": model},
        )
        self.attribute = attribute
        self.model = model


UnknownAttributeError = UnknownAttributeFault


# ── Registry ─────────────────────────────────────────────────────────────

class RegistryFault(Fault):
    """Raised when registry state is misused."""

    domain = FaultDomain.REGISTRY


class RegistryFrozenFault(RegistryFault):
    """Mutation attempted after ``freeze()``."""

    code = "REGISTRY_FROZEN"

    def __init__(self, operation: str, model: Optional[str] = None):
        target = f" on {model}" if model else ""
        super().__init__(
            f"Cannot {operation}{target}: attribute registry is frozen",
            metadata={"operation": operation, "model": model},
        )


# ── Schema ───────────────────────────────────────────────────────────────

class IntrospectionFault(Fault):
    """An introspector cannot describe a model type."""

    domain = FaultDomain.SCHEMA
    code = "INTROSPECTION_FAILED"

    def __init__(self, model: str, reason: str):
        super().__init__(
            f"Cannot introspect '{model}': {reason}",
            metadata={"model": model, "reason": reason},
        )
        self.model = model
