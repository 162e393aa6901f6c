# workflow/services/exceptions.py

"""
WORKFLOW SERVICE ERRORS

Centralized domain errors for the Budget/Order workflow.

Every error carries:
- code:    stable machine-readable identifier
- message: human readable explanation
- details: structured context (allowed transitions, required roles,
           offending field, ...) so a client can explain the rejection

Transport mapping (HTTP status codes) lives in workflow/api/errors.py.

`PermissionError` and `ValidationError` deliberately reuse familiar names;
import them from this module (or alias them) where the builtin / Django
names are also in scope.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


class WorkflowError(Exception):
    """Base exception for all workflow failures."""

    code = "WORKFLOW_ERROR"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def as_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class NotFoundError(WorkflowError):
    """Raised when the addressed entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id):
        super().__init__(
            f"{kind.capitalize()} {entity_id} not found",
            details={"kind": kind, "id": entity_id},
        )
        self.kind = kind
        self.entity_id = entity_id


class SameStateError(WorkflowError):
    """Raised when the requested status equals the current one."""

    code = "SAME_STATE"

    def __init__(self, current_status: str):
        super().__init__(
            f"Status is already {current_status}",
            details={"currentStatus": current_status, "requestedStatus": current_status},
        )
        self.current_status = current_status


class InvalidTransitionError(WorkflowError):
    """Raised when the requested status is not reachable from the current one."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, allowed: Iterable[str]):
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid status transition {from_status} -> {to_status}",
            details={"from": from_status, "to": to_status, "allowedTransitions": self.allowed},
        )
        self.from_status = from_status
        self.to_status = to_status


class PermissionError(WorkflowError):  # noqa: A001
    """Raised when the principal's role may not perform the operation."""

    code = "PERMISSION_DENIED"

    def __init__(
        self,
        message: str,
        *,
        required_roles: Iterable[str],
        role: Optional[str],
        target_status: Optional[str] = None,
    ):
        self.required_roles = list(required_roles)
        self.role = role
        details: dict[str, Any] = {"requiredRoles": self.required_roles, "userRole": role}
        if target_status is not None:
            details["targetStatus"] = target_status
        super().__init__(message, details=details)


class InvalidStateError(WorkflowError):
    """Raised when a compound operation's precondition is not met."""

    code = "INVALID_STATE"


class ImmutableFieldError(WorkflowError):
    """Raised when a protected field is changed after creation."""

    code = "IMMUTABLE_FIELD"

    def __init__(self, field: str, current, attempted, *, message: Optional[str] = None):
        super().__init__(
            message or f"Field '{field}' cannot be changed after creation",
            details={"field": field, "currentValue": current, "attemptedValue": attempted},
        )
        self.field = field
        self.current = current
        self.attempted = attempted


class ConflictError(WorkflowError):
    """Raised when a concurrent write changed the entity first."""

    code = "CONFLICT"


class ValidationError(WorkflowError):
    """Raised on malformed input shape or values."""

    code = "VALIDATION_ERROR"

    @classmethod
    def from_serializer(cls, serializer, message: str = "Invalid request data") -> "ValidationError":
        return cls(message, details=dict(serializer.errors))
