"""
PostgREST Integration Package

Provides an HTTP client for the Supabase REST endpoint with retry logic and error handling.
"""

from .client import PostgrestClient
from .exceptions import (
    PostgrestAuthError,
    PostgrestConflictError,
    PostgrestError,
    PostgrestNotFound,
    PostgrestRateLimitError,
    PostgrestTimeoutError,
)

__all__ = [
    "PostgrestClient",
    "PostgrestError",
    "PostgrestAuthError",
    "PostgrestConflictError",
    "PostgrestNotFound",
    "PostgrestRateLimitError",
    "PostgrestTimeoutError",
]
