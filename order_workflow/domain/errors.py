"""
Errors and Failure Classification

Two very different kinds of failure exist in the workflow:

1. Business failures (bad expiry date, declined card, refund not supported,
   undo without a prior execute). These are EXPECTED. They are reported as
   return values plus a structured log event carrying a ``failure_kind``.
2. Contract violations (a required collaborator is missing). These are
   programming errors and are raised.

``InvalidExpiryDateError`` sits in between: the pure parser raises it, and
every gateway catches it and turns it into a ``False`` result.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Classification attached to diagnostics as ``failure_kind``."""

    VALIDATION = "validation_error"  # Malformed input, e.g. expiry date
    AUTHORIZATION = "authorization_failure"  # Backend declined the payment
    UNSUPPORTED_OPERATION = "unsupported_operation"  # Backend can't do it, ever
    PROTOCOL_MISUSE = "protocol_misuse"  # Undo before execute, execute twice


class WorkflowError(Exception):
    """Base error for the order workflow."""

    def __init__(self, message: str, kind: FailureKind | None = None):
        self.kind = kind
        super().__init__(message)


class ValidationError(WorkflowError):
    """Input could not be translated for the payment backend."""

    def __init__(self, message: str):
        super().__init__(message, kind=FailureKind.VALIDATION)


class InvalidExpiryDateError(ValidationError):
    """
    Expiry date is not two numeric ``MM/YY`` components.

    Examples that raise: "1225", "12/25/01", "ab/25", "12/".
    """

    def __init__(self, expiry_date: str, reason: str):
        self.expiry_date = expiry_date
        self.reason = reason
        super().__init__(f"Invalid expiry date {expiry_date!r}: {reason}")


class ContractViolationError(WorkflowError):
    """A required argument or collaborator was not supplied."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} is required")


def require(value: T | None, name: str) -> T:
    """Return ``value`` or raise ``ContractViolationError`` if it is None."""
    if value is None:
        raise ContractViolationError(name)
    return value


def describe(kind: FailureKind, **context: Any) -> dict[str, Any]:
    """Build the common diagnostic fields for a failure log event."""
    return {"failure_kind": kind.value, **context}
