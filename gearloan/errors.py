"""
Error kinds raised by the lending core.

Every kind carries a stable ``code`` and a distinct ``status_code`` so a
transport layer can map it to a response without inspecting messages.
"""

from __future__ import annotations
from typing import Any, Dict, Optional


class LendingError(Exception):
    code = "LENDING_ERROR"
    status_code = 400
    title = "Bad Request"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.title,
            "code": self.code,
            "message": self.message,
            "status": self.status_code,
        }


class ConstraintViolation(LendingError):
    code = "CONSTRAINT_VIOLATION"
    status_code = 400
    title = "Bad Request"


class PermissionDenied(LendingError):
    code = "PERMISSION_DENIED"
    status_code = 403
    title = "Forbidden"


class NotFound(LendingError):
    code = "NOT_FOUND"
    status_code = 404
    title = "Resource Not Found"

    def __init__(self, resource: str, field: str, value: Any) -> None:
        super().__init__(f"{resource} not found with {field}: '{value}'")
        self.resource = resource
        self.field = field
        self.value = value


class InvalidTransition(LendingError):
    code = "INVALID_TRANSITION"
    status_code = 409
    title = "Invalid Transition"


class InsufficientAvailability(LendingError):
    code = "INSUFFICIENT_AVAILABILITY"
    status_code = 422
    title = "Insufficient Availability"

    def __init__(self, available: int, requested: int, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Not enough equipment available. Available: {available}"
        )
        self.available = available
        self.requested = requested

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["available"] = self.available
        body["requested"] = self.requested
        return body


class Conflict(LendingError):
    """A catalog item cannot be removed while requests still hold it.

    Maps to 423 Locked: the item is locked by its open requests, and 409 is
    already taken by ``InvalidTransition``.
    """

    code = "CONFLICT"
    status_code = 423
    title = "Conflict"


class InternalError(LendingError):
    code = "INTERNAL_ERROR"
    status_code = 500
    title = "Internal Server Error"
