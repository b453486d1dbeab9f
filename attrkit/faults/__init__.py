"""
attrkit faults - structured fault types raised by the attribute engine.
"""

from .core import Fault, FaultDomain, Severity
from .domains import (
    AttributeFault,
    IntrospectionFault,
    RegistryFault,
    RegistryFrozenFault,
    UnknownAttributeError,
    UnknownAttributeFault,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "AttributeFault",
    "UnknownAttributeFault",
    "UnknownAttributeError",
    "RegistryFault",
    "RegistryFrozenFault",
    "IntrospectionFault",
]
