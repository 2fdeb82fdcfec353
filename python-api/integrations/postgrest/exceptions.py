"""
PostgREST Custom Exceptions

Provides specific error types for different failure scenarios.
"""

from typing import Any, Optional


class PostgrestError(Exception):
    """Base exception for all PostgREST errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response or {}
        self.code = self.response.get("code")
        self.details = self.response.get("details")
        self.hint = self.response.get("hint")


class PostgrestAuthError(PostgrestError):
    """Raised when the API key is rejected (401, 403)"""

    def __init__(
        self,
        message: str = "Authentication failed",
        status_code: int = 401,
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, status_code, response)


class PostgrestNotFound(PostgrestError):
    """Raised when a table or a single requested row does not exist"""

    def __init__(
        self,
        message: str = "Resource not found",
        status_code: int = 404,
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, status_code, response)


class PostgrestConflictError(PostgrestError):
    """Raised on unique or foreign key violations (409)"""

    def __init__(
        self,
        message: str = "Conflicting row",
        status_code: int = 409,
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, status_code, response)


class PostgrestRateLimitError(PostgrestError):
    """Raised when rate limit is exceeded (429)"""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        status_code: int = 429,
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, status_code, response)


class PostgrestTimeoutError(PostgrestError):
    """Raised when request times out"""

    def __init__(self, message: str = "Request timed out", response: Optional[dict[str, Any]] = None):
        super().__init__(message, status_code=408, response=response)
