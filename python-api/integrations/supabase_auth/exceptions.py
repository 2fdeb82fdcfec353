"""
Supabase Auth Custom Exceptions

Provides specific error types for different authentication failure scenarios.
All exceptions include structured error codes and consistent error messaging.
"""

from datetime import datetime
from typing import Any, Optional


class SupabaseAuthError(Exception):
    """Base exception for all Supabase authentication errors"""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 401,
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize authentication error

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code (e.g., "INVALID_TOKEN")
            status_code: HTTP status code (default: 401)
            details: Optional additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class TokenExpiredError(SupabaseAuthError):
    """Raised when the session token has expired"""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message, error_code="TOKEN_EXPIRED", status_code=401)


class InvalidTokenError(SupabaseAuthError):
    """Raised when the session token is malformed or invalid"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, error_code="INVALID_TOKEN", status_code=401)


class AuthConnectionError(SupabaseAuthError):
    """Raised when unable to connect to Supabase Auth"""

    def __init__(self, message: str = "Failed to connect to authentication service"):
        super().__init__(message=message, error_code="CONNECTION_ERROR", status_code=503)


class AuthTimeoutError(SupabaseAuthError):
    """Raised when request to Supabase Auth times out"""

    def __init__(self, message: str = "Request to authentication service timed out"):
        super().__init__(message=message, error_code="TIMEOUT_ERROR", status_code=504)


def format_error_response(
    error: SupabaseAuthError, request_id: Optional[str] = None
) -> dict[str, Any]:
    """
    Format authentication error as consistent JSON response

    Args:
        error: SupabaseAuthError instance
        request_id: Optional request ID for tracing

    Returns:
        Dictionary with consistent error format:
        {
            "detail": "Human-readable error message",
            "error_code": "MACHINE_READABLE_CODE",
            "timestamp": "2025-12-28T12:34:56.789Z",
            "request_id": "req_123456" (optional)
        }
    """
    response = {
        "detail": error.message,
        "error_code": error.error_code,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }

    if request_id:
        response["request_id"] = request_id

    if error.details:
        response.update(error.details)

    return response
