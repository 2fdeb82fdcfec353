"""
Service Error Taxonomy

Exceptions raised inside services and their mapping onto ActionResult.
They never leave a public service method.
"""

from typing import Optional

from integrations.postgrest.exceptions import (
    PostgrestError,
    PostgrestNotFound,
    PostgrestTimeoutError,
)
from models.results import ActionResult, ErrorCode, FieldError


class ServiceError(Exception):
    """Base class for failures a service reports through its result envelope."""

    error_code: ErrorCode = "storage_error"

    def __init__(self, message: str, errors: Optional[list[FieldError]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_result(self) -> ActionResult:
        return ActionResult.fail(self.message, self.error_code, self.errors)


class ValidationError(ServiceError):
    """Malformed or missing input; carries field-scoped messages."""

    error_code: ErrorCode = "validation_error"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[FieldError(field=field, message=message)])


class AuthorizationError(ServiceError):
    """Caller lacks the role a gated operation needs."""

    error_code: ErrorCode = "authorization_error"


class StorageError(ServiceError):
    """The remote store rejected or could not complete a request."""

    error_code: ErrorCode = "storage_error"


class NotFoundError(ServiceError):
    """The addressed row does not exist."""

    error_code: ErrorCode = "not_found"


def storage_failure(exc: PostgrestError, fallback: str) -> ActionResult:
    """
    Map a storage exception onto a failed ActionResult.

    The store's own message is passed through; ``fallback`` is used only when
    it has none. A timeout leaves the outcome of a write unknown, so the
    message says so instead of claiming failure.
    """
    if isinstance(exc, PostgrestNotFound):
        return NotFoundError(exc.message or fallback).to_result()
    if isinstance(exc, PostgrestTimeoutError):
        return StorageError(
            f"{fallback}: the database did not respond in time, the change may or may not "
            "have been applied"
        ).to_result()
    return StorageError(exc.message or fallback).to_result()
