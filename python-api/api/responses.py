"""
Envelope responses.

Turns a service ActionResult into a JSON response whose body is the envelope
itself and whose status code reflects the failure category.
"""

from typing import Any, Callable, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from models.results import ActionResult

STATUS_BY_ERROR_CODE = {
    "validation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "authorization_error": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "storage_error": status.HTTP_502_BAD_GATEWAY,
}


def envelope_response(
    result: ActionResult,
    success_status: int = status.HTTP_200_OK,
    serialize: Optional[Callable[[Any], Any]] = None,
) -> JSONResponse:
    """
    Render an ActionResult.

    Args:
        result: Service outcome
        success_status: Status code used when ``result.success`` is True
        serialize: Optional conversion of ``result.data`` on success, e.g.
            validating rows through a response schema
    """
    if result.success:
        if serialize is not None and result.data is not None:
            result = result.model_copy(update={"data": serialize(result.data)})
        status_code = success_status
    else:
        status_code = STATUS_BY_ERROR_CODE.get(
            result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


def error_envelope(message: str, status_code: int, **extra: Any) -> dict[str, Any]:
    """Envelope body for failures raised outside a service (HTTP errors, bad requests)."""
    return {
        "success": False,
        "data": None,
        "message": None,
        "error": message,
        "error_code": extra.pop("error_code", None),
        "errors": extra.pop("errors", None),
        "status_code": status_code,
        **extra,
    }
