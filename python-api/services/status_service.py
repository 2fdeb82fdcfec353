"""
Registration Status Service

Review-status changes on competition registrations. Any status may be set
from any other status; there are no forbidden transitions.
"""

import logging
from datetime import datetime, timezone
from typing import Union

from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.exceptions import PostgrestError
from integrations.postgrest.filters import eq, in_
from models.registration import RegistrationStatus
from models.results import ActionResult
from services.errors import NotFoundError, ServiceError, ValidationError, storage_failure

logger = logging.getLogger(__name__)

VALID_STATUSES = ", ".join(status.value for status in RegistrationStatus)


def parse_status(value: Union[str, RegistrationStatus]) -> RegistrationStatus:
    """
    Normalize a status value.

    Accepts the canonical values in any case and the legacy "approved".

    Raises:
        ValidationError: For any other value
    """
    try:
        return RegistrationStatus(value)
    except ValueError:
        raise ValidationError.for_field(
            "status", f"Invalid status '{value}'. Must be one of: {VALID_STATUSES}"
        )


async def event_competition_ids(postgrest_client: PostgrestClient, event_id: str) -> list[str]:
    """IDs of every competition (published or not) belonging to an event."""
    rows = await postgrest_client.tables.select(
        "competitions", columns="id", filters={"event_id": eq(event_id)}
    )
    return [row["id"] for row in rows]


async def set_status(
    postgrest_client: PostgrestClient,
    registration_id: str,
    new_status: Union[str, RegistrationStatus],
) -> ActionResult:
    """
    Set the status of one competition registration.

    Args:
        postgrest_client: PostgREST client instance
        registration_id: Competition registration ID
        new_status: pending, confirmed or rejected

    Returns:
        ActionResult with the updated registration row; ``not_found`` if no
        registration has that ID
    """
    try:
        status = parse_status(new_status)

        rows = await postgrest_client.tables.update(
            "competitions_participants",
            {"status": status.value, "updated_at": datetime.now(timezone.utc).isoformat()},
            filters={"id": eq(registration_id)},
        )

        if not rows:
            raise NotFoundError(f"Registration {registration_id} not found")

        logger.info(f"Registration {registration_id} status set to {status.value}")

        return ActionResult.ok(rows[0], f"Participant status updated to {status.value}")

    except ServiceError as e:
        return e.to_result()
    except PostgrestError as e:
        logger.error(f"Database error updating registration {registration_id}: {e}")
        return storage_failure(e, "Failed to update participant status")


async def set_all_statuses_for_participant(
    postgrest_client: PostgrestClient,
    participant_id: str,
    event_id: str,
    new_status: Union[str, RegistrationStatus],
) -> ActionResult:
    """
    Set the status of every registration a participant holds in one event.

    Registrations for competitions of other events are left untouched. The
    update itself is a single statement, so it applies to all matching rows
    or to none.

    Args:
        postgrest_client: PostgREST client instance
        participant_id: Participant ID
        event_id: Event whose competitions scope the update
        new_status: pending, confirmed or rejected

    Returns:
        ActionResult with the list of updated registration rows
    """
    try:
        status = parse_status(new_status)

        competition_ids = await event_competition_ids(postgrest_client, event_id)
        if not competition_ids:
            return ActionResult.ok([], f"Event {event_id} has no competitions to update")

        rows = await postgrest_client.tables.update(
            "competitions_participants",
            {"status": status.value, "updated_at": datetime.now(timezone.utc).isoformat()},
            filters={
                "participant_id": eq(participant_id),
                "competition_id": in_(competition_ids),
            },
        )

        logger.info(
            f"Set {len(rows)} registration(s) of participant {participant_id} "
            f"in event {event_id} to {status.value}"
        )

        return ActionResult.ok(
            rows, f"All registrations for participant updated to {status.value}"
        )

    except ServiceError as e:
        return e.to_result()
    except PostgrestError as e:
        logger.error(
            f"Database error updating registrations of participant {participant_id}: {e}"
        )
        return storage_failure(e, "Failed to update all participant statuses")
