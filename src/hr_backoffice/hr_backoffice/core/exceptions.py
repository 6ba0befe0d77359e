from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is a stable machine-readable identifier and ``status_code`` the HTTP
    status the controller layer renders it with.
    """

    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``errors`` holds field-level details: ``[{"field", "message", "code"}]``.
    """

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, *, errors: Optional[list[dict[str, str]]] = None, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.errors = list(errors or [])

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.errors:
            data["details"] = [dict(e) for e in self.errors]
        return data


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no session exists."""

    code = "AUTHENTICATION_REQUIRED"
    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "INSUFFICIENT_PERMISSIONS"
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(DomainError):
    """Unique-key collisions (duplicate email, code, employee number)."""

    code = "ALREADY_EXISTS"
    status_code = 409

    def __init__(self, message: str = "Record already exists", *, constraint: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.constraint = constraint


class ConcurrentUpdateError(ConflictError):
    code = "CONCURRENT_UPDATE"

    def __init__(self, message: str = "Record was modified concurrently, reload and retry"):
        super().__init__(message)


class ReferenceNotFoundError(DomainError):
    code = "REFERENCE_NOT_FOUND"
    status_code = 422

    def __init__(self, message: str = "Referenced entity not found"):
        super().__init__(message)


class InvalidTransitionError(DomainError):
    """A well-formed status change that the lifecycle table does not allow."""

    code = "INVALID_TRANSITION"
    status_code = 409

    def __init__(self, current: Any, requested: Any):
        current_s = getattr(current, "value", current)
        requested_s = getattr(requested, "value", requested)
        super().__init__(f"Transition {current_s} -> {requested_s} is not allowed")
        self.current = current
        self.requested = requested


class SequenceExhaustedError(DomainError):
    code = "SEQUENCE_EXHAUSTED"
    status_code = 409


class InternalError(DomainError):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)
