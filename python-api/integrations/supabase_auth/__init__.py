"""
Supabase Auth Integration Package

Verifies user session tokens against the Supabase Auth (GoTrue) endpoint.
"""

from .client import SupabaseAuthClient
from .exceptions import (
    AuthConnectionError,
    AuthTimeoutError,
    InvalidTokenError,
    SupabaseAuthError,
    TokenExpiredError,
    format_error_response,
)

__all__ = [
    "SupabaseAuthClient",
    "SupabaseAuthError",
    "AuthConnectionError",
    "AuthTimeoutError",
    "InvalidTokenError",
    "TokenExpiredError",
    "format_error_response",
]
