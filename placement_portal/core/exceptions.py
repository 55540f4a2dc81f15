"""Custom exceptions for the placement portal.

Services raise these; the exception handlers registered in ``main.py`` turn
them into JSON responses with the matching HTTP status.
"""

from typing import Any, Dict, List, Optional


class PortalError(Exception):
    """Base exception for all placement portal errors."""

    status_code: int = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize the exception.

        Args:
            message: Human-readable message, returned to the client as ``detail``
            error_code: Optional error code for categorization
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(PortalError):
    """Malformed input caught before anything is persisted."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field

    @classmethod
    def from_errors(cls, errors: List[Dict[str, Any]]) -> "ValidationError":
        """Build from pydantic's ``errors()`` list, surfacing the first problem."""
        if not errors:
            return cls("Invalid input")
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = str(first.get("msg", "Invalid input")).removeprefix("Value error, ")
        if field:
            message = f"{field}: {message}"
        return cls(message, field=field or None, details={"errors": [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors
        ]})


class AuthenticationError(PortalError):
    """Missing, malformed or expired bearer token."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTHENTICATION_ERROR", details)


class AuthorizationError(PortalError):
    """Authenticated, but the role does not allow the operation."""

    status_code = 403

    def __init__(self, message: str = "Admin access required", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTHORIZATION_ERROR", details)


class NotFoundError(PortalError):
    """Referenced record does not exist."""

    status_code = 404

    def __init__(self, message: str, resource: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "NOT_FOUND", details)
        self.resource = resource


class EligibilityError(PortalError):
    """Business-rule rejection of an application.

    Deterministic for the current state, so callers never retry it.
    """

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "NOT_ELIGIBLE", details)


class ConflictError(PortalError):
    """Unique constraint already claimed (duplicate application, duplicate USN)."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFLICT", details)
