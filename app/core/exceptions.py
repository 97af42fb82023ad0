"""
Custom exception classes for standardized error handling.
"""

from enum import Enum
from typing import Any, Dict, Optional


class StoreErrorKind(str, Enum):
    """Typed classification of backing-store failures."""

    CONFLICT = "conflict"
    INVALID_ARGUMENT = "invalid_argument"
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class AppException(Exception):
    """Base exception class for application errors."""

    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or "APP_ERROR"
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {"error": self.error_code, "message": self.message, "details": self.details}


class ValidationError(AppException):
    """Exception raised for validation errors."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="VALIDATION_ERROR", details={"field": field, **(details or {})})


class ConflictError(AppException):
    """Exception raised when a uniqueness constraint is violated."""

    status_code = 409

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="CONFLICT_ERROR", details={"field": field, **(details or {})})


class DatabaseError(AppException):
    """Exception raised for database operation errors.

    Carries a StoreErrorKind so callers can branch on the failure type
    instead of inspecting message text.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        kind: StoreErrorKind = StoreErrorKind.UNKNOWN,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation
        self.kind = kind
        self.field = field
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            details={"operation": operation, "kind": kind.value, "field": field, **(details or {})},
        )


class PermissionDeniedError(AppException):
    """Exception raised when the backing store rejects the service's credentials."""

    def __init__(self, message: str = "Database permission error. Please contact support.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="PERMISSION_ERROR", details=details)


class InternalError(AppException):
    """Exception raised when a step completed without producing its record."""

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="INTERNAL_ERROR", details={"operation": operation, **(details or {})})


class UnknownError(AppException):
    """Exception raised for unexpected failures; the message stays generic."""

    def __init__(self, message: str = "An unexpected error occurred. Please try again later.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="UNKNOWN_ERROR", details=details)


class AuthenticationError(AppException):
    """Exception raised for authentication failures."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="AUTHENTICATION_ERROR", details=details)
