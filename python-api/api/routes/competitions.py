"""
Competition Management Routes

Public listing of an event's published competitions, plus admin endpoints for
creating, editing, publishing, deleting and ordering competitions.
"""

import logging
from typing import Any

from api.dependencies import require_admin_or_executive
from api.responses import envelope_response
from api.schemas.competitions import (
    CompetitionCreateRequest,
    CompetitionPublishRequest,
    CompetitionReorderRequest,
    CompetitionResponse,
    CompetitionUpdateRequest,
)
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.dependencies import get_postgrest_client
from services.competition_service import (
    create_competition,
    delete_competition,
    list_event_competitions,
    reorder_competitions,
    set_competition_published,
    update_competition,
)

# Configure logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/events", tags=["Competitions"])

admin_router = APIRouter(
    prefix="/api/v1/admin",
    tags=["Competitions (admin)"],
    dependencies=[Depends(require_admin_or_executive)],
)


def _competition(row: dict[str, Any]) -> dict[str, Any]:
    return CompetitionResponse.model_validate(row).model_dump(mode="json")


def _competitions(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [_competition(row) for row in rows]


@router.get(
    "/{event_id}/competitions",
    summary="List published competitions",
    description="Published competitions of an event in display order (public)",
)
async def list_published_competitions(
    event_id: str,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    result = await list_event_competitions(postgrest, event_id, published_only=True)
    return envelope_response(result, serialize=_competitions)


@admin_router.get(
    "/events/{event_id}/competitions",
    summary="List all competitions",
    description="All competitions of an event, published or not, in display order",
)
async def list_all_competitions(
    event_id: str,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    result = await list_event_competitions(postgrest, event_id)
    return envelope_response(result, serialize=_competitions)


@admin_router.post(
    "/events/{event_id}/competitions",
    status_code=status.HTTP_201_CREATED,
    summary="Create competition",
)
async def create_competition_endpoint(
    event_id: str,
    request: CompetitionCreateRequest,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    Create a competition under an event.

    Without `display_order` the competition is placed after the event's last one.
    """
    result = await create_competition(
        postgrest,
        event_id=event_id,
        title=request.title,
        description=request.description,
        fee=request.fee,
        is_published=request.is_published,
        display_order=request.display_order,
    )
    return envelope_response(result, status.HTTP_201_CREATED, serialize=_competition)


@admin_router.patch(
    "/competitions/{competition_id}",
    summary="Update competition",
)
async def update_competition_endpoint(
    competition_id: str,
    request: CompetitionUpdateRequest,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    result = await update_competition(
        postgrest, competition_id, request.model_dump(exclude_unset=True)
    )
    return envelope_response(result, serialize=_competition)


@admin_router.patch(
    "/competitions/{competition_id}/publish",
    summary="Publish or unpublish competition",
)
async def publish_competition_endpoint(
    competition_id: str,
    request: CompetitionPublishRequest,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    result = await set_competition_published(postgrest, competition_id, request.is_published)
    return envelope_response(result, serialize=_competition)


@admin_router.delete(
    "/competitions/{competition_id}",
    summary="Delete competition",
)
async def delete_competition_endpoint(
    competition_id: str,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    Permanently delete a competition.

    Refused with 422 while the competition has registrations.
    """
    result = await delete_competition(postgrest, competition_id)
    return envelope_response(result, serialize=_competition)


@admin_router.put(
    "/events/{event_id}/competitions/order",
    summary="Reorder competitions",
)
async def reorder_competitions_endpoint(
    event_id: str,
    request: CompetitionReorderRequest,
    postgrest: PostgrestClient = Depends(get_postgrest_client),
) -> JSONResponse:
    """
    Set the display order of an event's competitions.

    `competition_ids` must contain every competition of the event exactly once;
    they are numbered 1..N in that order.
    """
    result = await reorder_competitions(postgrest, event_id, request.competition_ids)
    return envelope_response(result, serialize=_competitions)
