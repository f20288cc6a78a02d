"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API
2. HTTP status code mapping for FastAPI
3. A stable, machine-readable error kind in every response
4. No raw driver or internal error text in responses

IMPORTANT: Raise these from DAOs, services and dependencies. The exception
handlers in app startup turn them into JSON responses.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    WHY: Centralizing exception handling in a base class ensures consistent
    error responses and HTTP status code mapping.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        """Machine-readable error kind (the exception class name)."""
        return self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        sensitive_fields = {"password", "token", "secret", "key", "api_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.kind,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when no usable credential was presented.

    WHY: A missing bearer token (or wrong login credentials) is reported as
    401 so clients know to log in.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Access denied"


class AuthorizationError(AppException):
    """
    Raised when an authenticated caller is denied by the access policy.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "You do not have permission to perform this action"


class TokenInvalidError(AppException):
    """
    Raised when a bearer token is malformed, has a bad signature or lacks
    the claims needed to build a caller context.

    WHY: A credential was presented but cannot be trusted. The API reports
    this as 403, distinct from the 401 of a missing credential.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "Invalid token"


class TokenExpiredError(TokenInvalidError):
    """
    Raised when a bearer token has expired.

    HTTP Status: 403 Forbidden
    """

    default_message = "Token has expired"


# ============================================================================
# Validation & Input Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails (missing or empty required field).

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


class InvalidEnumValueError(ValidationError):
    """
    Raised when a value is outside a closed set (status, priority,
    category, role).

    HTTP Status: 400 Bad Request
    """

    default_message = "Invalid enum value"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist (or is outside the
    caller's scope).

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class TicketNotFoundError(ResourceNotFoundError):
    """Ticket not found."""

    default_message = "Ticket not found"


class ConflictError(AppException):
    """
    Raised when a write contradicts data already stored (a foreign key
    pointing nowhere, a check constraint).

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Request conflicts with existing data"


class ResourceAlreadyExistsError(ConflictError):
    """
    Raised when a unique constraint would be violated (e.g. duplicate email).

    HTTP Status: 409 Conflict
    """

    default_message = "Resource already exists"


# ============================================================================
# Database Exceptions
# ============================================================================


class StoreUnavailableError(AppException):
    """
    Raised when the database cannot be reached, times out, or the
    connection pool is exhausted.

    WHY: Persistence outages are not domain errors. They are surfaced
    immediately (no internal retry) so the caller decides whether to retry
    the whole request.

    HTTP Status: 503 Service Unavailable
    """

    status_code = 503
    default_message = "Data store is unavailable"
