"""
Action Result Envelope

Uniform return type of every public service operation.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

ErrorCode = Literal["validation_error", "authorization_error", "storage_error", "not_found"]


class FieldError(BaseModel):
    """A validation message scoped to one input field."""

    field: str = Field(..., description="Field name, dotted for nested fields")
    message: str = Field(..., description="Human-readable message")


class ActionResult(BaseModel):
    """
    Outcome of a service operation.

    ``success`` is True with ``data`` (and usually ``message``) on success, or
    False with ``error``, ``error_code`` and, for validation failures, the
    field-scoped ``errors`` list.
    """

    success: bool = Field(..., description="Whether the operation succeeded")
    data: Any = Field(None, description="Operation payload")
    message: Optional[str] = Field(None, description="Success message")
    error: Optional[str] = Field(None, description="Failure message")
    error_code: Optional[ErrorCode] = Field(None, description="Failure category")
    errors: Optional[list[FieldError]] = Field(None, description="Field-level validation errors")

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ActionResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: ErrorCode,
        errors: Optional[list[FieldError]] = None,
    ) -> "ActionResult":
        return cls(success=False, error=error, error_code=error_code, errors=errors)


def field_errors_from_pydantic(
    exc: PydanticValidationError, skip_prefix: tuple[str, ...] = ("body",)
) -> list[FieldError]:
    """
    Convert Pydantic errors (or FastAPI request validation errors) to FieldErrors.

    Args:
        exc: Pydantic ValidationError, or anything exposing ``errors()``
        skip_prefix: Leading location parts to drop (FastAPI prefixes "body")
    """
    field_errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if str(part) not in skip_prefix]
        message = error.get("msg", "Invalid value")
        # "Value error, Class must be ..." -> "Class must be ..."
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        field_errors.append(FieldError(field=".".join(loc) or "__root__", message=message))
    return field_errors
