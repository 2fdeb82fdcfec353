"""
Participant Management Service

Admin-side view of who registered for an event, grouped per participant.
"""

import logging
from typing import Any, Optional

from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.exceptions import PostgrestError
from integrations.postgrest.filters import in_
from models.registration import RegistrationStatus
from models.results import ActionResult
from services.errors import ServiceError, storage_failure
from services.status_service import event_competition_ids, parse_status

logger = logging.getLogger(__name__)

REGISTRATION_WITH_RELATIONS = "*,participant:participants(*),competition:competitions(*)"


def group_registrations(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Group joined registration rows into one entry per participant.

    Entries keep the order in which each participant first appears in ``rows``.

    Args:
        rows: competitions_participants rows with embedded ``participant`` and
            ``competition`` objects

    Returns:
        List of {"participant": {...}, "registrations": [{..., "competition": {...}}]}
    """
    grouped: dict[str, dict[str, Any]] = {}

    for row in rows:
        participant = row.get("participant")
        if not participant:
            logger.warning(f"Registration {row.get('id')} has no participant row, skipping")
            continue

        entry = grouped.setdefault(
            participant["id"], {"participant": participant, "registrations": []}
        )
        entry["registrations"].append(
            {
                "id": row["id"],
                "competition_id": row["competition_id"],
                "status": row["status"],
                "created_at": row.get("created_at"),
                "updated_at": row.get("updated_at"),
                "competition": row.get("competition"),
            }
        )

    return list(grouped.values())


def filter_participants(
    participants: list[dict[str, Any]],
    search: Optional[str] = None,
    competition_id: Optional[str] = None,
    status: Optional[RegistrationStatus] = None,
) -> list[dict[str, Any]]:
    """
    Narrow a grouped participant list the way the admin table does.

    Args:
        participants: Output of group_registrations()
        search: Case-insensitive text matched against name, email,
            institution and student ID
        competition_id: Keep participants registered for this competition
        status: Keep participants with at least one registration in this status
    """
    needle = (search or "").strip().lower()
    result = []

    for entry in participants:
        participant = entry["participant"]
        registrations = entry["registrations"]

        if needle:
            haystack = [
                participant.get("name"),
                participant.get("email"),
                participant.get("institution"),
                participant.get("id_at_institution"),
            ]
            if not any(needle in (value or "").lower() for value in haystack):
                continue

        if competition_id and not any(
            reg["competition_id"] == competition_id for reg in registrations
        ):
            continue

        if status and not any(reg["status"] == status.value for reg in registrations):
            continue

        result.append(entry)

    return result


def compute_participant_stats(participants: list[dict[str, Any]]) -> dict[str, int]:
    """
    Summary counts for the review screen.

    A participant counts as confirmed when any registration is confirmed,
    otherwise as pending when any registration is pending.
    """
    confirmed = 0
    pending = 0
    total_registrations = 0

    for entry in participants:
        statuses = {reg["status"] for reg in entry["registrations"]}
        total_registrations += len(entry["registrations"])
        if RegistrationStatus.CONFIRMED.value in statuses:
            confirmed += 1
        elif RegistrationStatus.PENDING.value in statuses:
            pending += 1

    return {
        "total": len(participants),
        "confirmed": confirmed,
        "pending": pending,
        "total_registrations": total_registrations,
    }


class ParticipantsService:
    """Service for reviewing an event's participants."""

    def __init__(self, postgrest_client: PostgrestClient):
        """
        Initialize participants service.

        Args:
            postgrest_client: PostgREST client instance
        """
        self.db = postgrest_client

    async def get_event_participants(self, event_id: str) -> ActionResult:
        """
        List every participant registered for any competition of an event.

        Each participant appears once, with one registration entry per
        competition they registered for (newest registrations first). An event
        without competitions yields an empty list.

        Args:
            event_id: Event ID

        Returns:
            ActionResult with the grouped participant list
        """
        try:
            competition_ids = await event_competition_ids(self.db, event_id)
            if not competition_ids:
                return ActionResult.ok([])

            rows = await self.db.tables.select(
                "competitions_participants",
                columns=REGISTRATION_WITH_RELATIONS,
                filters={"competition_id": in_(competition_ids)},
                order="created_at.desc",
            )

            participants = group_registrations(rows)

            logger.info(
                f"Listed {len(participants)} participants ({len(rows)} registrations) "
                f"for event {event_id}"
            )

            return ActionResult.ok(participants)

        except PostgrestError as e:
            logger.error(f"Database error listing participants of event {event_id}: {e}")
            return storage_failure(e, "Failed to fetch event participants")

    async def review_event_participants(
        self,
        event_id: str,
        search: Optional[str] = None,
        competition_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> ActionResult:
        """
        Participants of an event for the admin review table.

        Statistics are computed over all participants; filters only narrow the
        returned list.

        Returns:
            ActionResult with ``data`` = {"participants": [...], "stats": {...}}
        """
        try:
            status_filter = parse_status(status) if status else None
        except ServiceError as e:
            return e.to_result()

        result = await self.get_event_participants(event_id)
        if not result.success:
            return result

        participants = result.data
        return ActionResult.ok(
            {
                "participants": filter_participants(
                    participants, search, competition_id, status_filter
                ),
                "stats": compute_participant_stats(participants),
            }
        )
