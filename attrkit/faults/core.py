"""
attrkit faults - the base of every error attrkit raises on purpose.

A fault is an exception with a stable ``code`` callers can match on,
the ``domain`` it belongs to, a ``severity`` and a ``metadata`` dict
naming the attribute, model or operation involved. Subclasses pin
``domain`` and ``code`` as class attributes and only build the message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Dict, Optional


class Severity(str, Enum):
    """How a consumer should treat a fault."""

    ERROR = "error"
    FATAL = "fatal"  # boot-phase contract broken; fix the model code


class FaultDomain(str, Enum):
    """Which part of attrkit raised the fault."""

    ATTRIBUTES = "attributes"  # resolution
    REGISTRY = "registry"  # declaration-time state
    SCHEMA = "schema"  # introspection

    @property
    def default_severity(self) -> Severity:
        return Severity.FATAL if self is FaultDomain.REGISTRY else Severity.ERROR


class Fault(Exception):
    """
    Structured attrkit error.

    ``str(fault)`` renders as ``[CODE] message``::

        >>> str(UnknownAttributeFault("nickname", "User"))
        "[UNKNOWN_ATTRIBUTE] Unknown attribute 'nickname' for model User"
    """

    domain: ClassVar[FaultDomain]
    code: str

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        severity: Optional[Severity] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        if code is not None:
            self.code = code
        if getattr(self, "code", None) is None or getattr(type(self), "domain", None) is None:
            raise TypeError(f"{type(self).__name__} needs a code and a domain")

        super().__init__(message)
        self.message = message
        self.severity = severity or self.domain.default_severity
        self.metadata = dict(metadata or {})

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"
