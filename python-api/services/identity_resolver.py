"""
Participant Identity Resolver

Finds a previously submitted participant matching a registration's contact
details. Matching is advisory: the registration flow does not refuse a
submission because a match exists.
"""

import logging
from typing import Optional

from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.exceptions import PostgrestError
from integrations.postgrest.filters import and_, condition, or_
from models.results import ActionResult, FieldError
from services.errors import ValidationError, storage_failure

logger = logging.getLogger(__name__)


async def find_existing_participant(
    postgrest_client: PostgrestClient,
    email: Optional[str],
    id_at_institution: str,
    institution: str,
) -> ActionResult:
    """
    Find a participant by email OR by (id_at_institution, institution).

    Args:
        postgrest_client: PostgREST client instance
        email: Contact email; may be empty, in which case only the pair is used
        id_at_institution: Student ID at the institution
        institution: Institution name

    Returns:
        ActionResult whose ``data`` is the earliest matching participant row,
        or None when nothing matches. Storage failures come back as
        ``storage_error`` results, never as a None match.
    """
    try:
        id_at_institution = (id_at_institution or "").strip()
        institution = (institution or "").strip()
        email = (email or "").strip()

        missing = []
        if not id_at_institution:
            missing.append(FieldError(field="id_at_institution", message="Student ID is required"))
        if not institution:
            missing.append(FieldError(field="institution", message="Institution is required"))
        if missing:
            raise ValidationError("Student ID and institution are required", errors=missing)

        pair = and_(
            condition("id_at_institution", "eq", id_at_institution),
            condition("institution", "eq", institution),
        )
        match = or_(condition("email", "eq", email), pair) if email else or_(pair)

        rows = await postgrest_client.tables.select(
            "participants",
            filters={"or": match},
            order="created_at.asc",
            limit=1,
        )

        if not rows:
            return ActionResult.ok(None, "No existing participant found")

        participant = rows[0]
        logger.warning(
            f"Registration details match existing participant {participant.get('id')} "
            f"({institution} / {id_at_institution})"
        )
        return ActionResult.ok(participant, "Existing participant found")

    except ValidationError as e:
        return e.to_result()
    except PostgrestError as e:
        logger.error(f"Database error looking up participant: {e}")
        return storage_failure(e, "Failed to check existing participant")
