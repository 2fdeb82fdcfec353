"""
Participant Review Routes

Admin endpoints for reviewing an event's participants and changing the
status of their competition registrations.
"""

import logging
from typing import Any, Optional

from api.dependencies import require_admin_or_executive
from api.responses import envelope_response
from api.schemas.participants import EventParticipantsData
from api.schemas.registrations import (
    CompetitionRegistrationResponse,
    ParticipantResponse,
    StatusUpdateRequest,
)
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.dependencies import get_postgrest_client
from services.identity_resolver import find_existing_participant
from services.participants_service import ParticipantsService
from services.status_service import set_all_statuses_for_participant, set_status

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["Participants"],
    dependencies=[Depends(require_admin_or_executive)],
)


def _registration(row: dict[str, Any]) -> dict[str, Any]:
    return CompetitionRegistrationResponse.model_validate(row).model_dump(mode="json")


@router.get(
    "/events/{event_id}/participants",
    summary="List event participants",
    description="Participants of an event grouped with their registrations, plus summary counts",
)
async def list_event_participants(
    event_id: str,
    search: Optional[str] = Query(
        None, description="Match name, email, institution or student ID"
    ),
    competition_id: Optional[str] = Query(
        None, description="Only participants registered for this competition"
    ),
    status: Optional[str] = Query(
        None, description="Only participants with a registration in this status"
    ),
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    List participants for the admin review table.

    - **search**: Case-insensitive text filter
    - **competition_id**: Competition filter
    - **status**: pending, confirmed or rejected

    `stats` always covers every participant of the event, regardless of filters.
    Each participant entry carries `total_fee` over its registered competitions.
    """
    service = ParticipantsService(postgrest)

    result = await service.review_event_participants(
        event_id, search=search, competition_id=competition_id, status=status
    )

    def serialize(data: dict[str, Any]) -> dict[str, Any]:
        return EventParticipantsData.model_validate(
            {"event_id": event_id, **data}
        ).model_dump(mode="json", by_alias=True)

    return envelope_response(result, serialize=serialize)


@router.patch(
    "/registrations/{registration_id}/status",
    summary="Update registration status",
)
async def update_registration_status(
    registration_id: str,
    request: StatusUpdateRequest,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    Set the status of one competition registration.

    Returns 404 when no registration has that ID.
    """
    result = await set_status(postgrest, registration_id, request.status)
    return envelope_response(result, serialize=_registration)


@router.patch(
    "/events/{event_id}/participants/{participant_id}/status",
    summary="Update all registrations of a participant",
)
async def update_participant_status(
    event_id: str,
    participant_id: str,
    request: StatusUpdateRequest,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    Set the status of every registration a participant holds in an event.

    Registrations in other events are not changed.
    """
    result = await set_all_statuses_for_participant(
        postgrest, participant_id, event_id, request.status
    )
    return envelope_response(
        result, serialize=lambda rows: [_registration(row) for row in rows]
    )


@router.get(
    "/participants/lookup",
    summary="Find existing participant",
    description="Find an earlier participant by email or by student ID and institution",
)
async def lookup_participant(
    id_at_institution: str = Query(..., description="Student ID at the institution"),
    institution: str = Query(..., description="Institution name"),
    email: Optional[str] = Query(None, description="Contact email"),
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    Look up a participant matching the given details.

    `data` is null when nothing matches.
    """
    result = await find_existing_participant(postgrest, email, id_at_institution, institution)
    return envelope_response(
        result,
        serialize=lambda row: ParticipantResponse.model_validate(row).model_dump(
            mode="json", by_alias=True
        ),
    )
