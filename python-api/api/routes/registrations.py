"""
Event Registration Routes

Public endpoint for registering to an event's competitions.
"""

import logging
from typing import Any

from api.responses import envelope_response
from api.schemas.registrations import RegistrationData
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.dependencies import get_postgrest_client
from models.registration import RegistrationForm
from services.registration_service import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/events", tags=["Registrations"])


def _registration_payload(data: dict[str, Any]) -> dict[str, Any]:
    return RegistrationData.model_validate(data).model_dump(mode="json", by_alias=True)


@router.post(
    "/{event_id}/registrations",
    status_code=status.HTTP_201_CREATED,
    summary="Register for event",
    description="Register a participant for one or more competitions of an event (public)",
)
async def register_for_event(
    event_id: str,
    form: RegistrationForm,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    Register for an event.

    - **event_id**: Event whose competitions are selected
    - **competitions**: One or more competition IDs of that event

    When any selected competition has a fee, `transaction_id` and
    `payment_provider` are required.

    Returns the envelope `{success, data, message, error, error_code, errors}`
    with the participant, one pending registration per competition and the
    total fee.

    Errors:
    - 404: Event not found
    - 422: Invalid fields or missing payment details
    - 502: Database error
    """
    service = RegistrationService(postgrest)

    result = await service.submit_registration(event_id, form)

    return envelope_response(
        result, success_status=status.HTTP_201_CREATED, serialize=_registration_payload
    )
