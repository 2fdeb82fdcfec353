"""
Competition Management Service

Provides competition CRUD, publishing and ordering within an event.
Uses the PostgREST tables API for data persistence.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.exceptions import PostgrestError
from integrations.postgrest.filters import eq
from models.results import ActionResult
from services.errors import NotFoundError, ServiceError, ValidationError, storage_failure

# Configure logger
logger = logging.getLogger(__name__)

COMPETITION_ORDER = "display_order.asc,created_at.asc"

# Columns an admin may change through update_competition(); ordering goes through
# reorder_competitions() so display_order stays a 1..N sequence.
UPDATABLE_FIELDS = {"title", "description", "fee", "is_published"}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_fee(fee: Any) -> None:
    if fee is None or isinstance(fee, bool) or not isinstance(fee, (int, float)) or fee < 0:
        raise ValidationError.for_field("fee", "Fee must be a non-negative number")


def _check_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise ValidationError.for_field("title", "Title is required")
    return title.strip()


async def _get_competition(postgrest_client: PostgrestClient, competition_id: str) -> Dict[str, Any]:
    rows = await postgrest_client.tables.select(
        "competitions", filters={"id": eq(competition_id)}, limit=1
    )
    if not rows:
        raise NotFoundError(f"Competition {competition_id} not found")
    return rows[0]


async def list_event_competitions(
    postgrest_client: PostgrestClient,
    event_id: str,
    published_only: bool = False,
) -> ActionResult:
    """
    List the competitions of an event in display order.

    Args:
        postgrest_client: PostgREST client instance
        event_id: Event ID
        published_only: Hide unpublished competitions (public registration form)

    Returns:
        ActionResult with competition rows, ties in display_order broken by
        creation time
    """
    try:
        filters = {"event_id": eq(event_id)}
        if published_only:
            filters["is_published"] = eq(True)

        rows = await postgrest_client.tables.select(
            "competitions", filters=filters, order=COMPETITION_ORDER
        )
        return ActionResult.ok(rows)

    except PostgrestError as e:
        logger.error(f"Database error listing competitions of event {event_id}: {e}")
        return storage_failure(e, "Failed to fetch competitions")


async def create_competition(
    postgrest_client: PostgrestClient,
    event_id: str,
    title: str,
    description: Optional[Any] = None,
    fee: float = 0,
    is_published: bool = False,
    display_order: Optional[int] = None,
) -> ActionResult:
    """
    Create a competition under an event.

    Args:
        postgrest_client: PostgREST client instance
        event_id: Owning event
        title: Competition title (required, non-empty)
        description: Rich-text document, stored as given
        fee: Registration fee, 0 for free
        is_published: Visible on the public registration form
        display_order: Position; defaults to after the event's last competition,
            an explicit position must not already be taken in the event

    Returns:
        ActionResult with the created competition row
    """
    try:
        title = _check_title(title)
        _check_fee(fee)

        events = await postgrest_client.tables.select(
            "events", columns="id", filters={"id": eq(event_id)}, limit=1
        )
        if not events:
            raise NotFoundError(f"Event {event_id} not found")

        if display_order is None:
            last = await postgrest_client.tables.select(
                "competitions",
                columns="display_order",
                filters={"event_id": eq(event_id)},
                order="display_order.desc",
                limit=1,
            )
            display_order = (last[0]["display_order"] + 1) if last else 1
        else:
            taken = await postgrest_client.tables.select(
                "competitions",
                columns="id",
                filters={"event_id": eq(event_id), "display_order": eq(display_order)},
                limit=1,
            )
            if taken:
                raise ValidationError.for_field(
                    "display_order",
                    f"Position {display_order} is already used by another competition "
                    "of this event",
                )

        now = _now()
        record = {
            "id": str(uuid.uuid4()),
            "event_id": event_id,
            "title": title,
            "description": description,
            "fee": fee,
            "is_published": is_published,
            "display_order": display_order,
            "created_at": now,
            "updated_at": now,
        }

        rows = await postgrest_client.tables.insert("competitions", [record])

        logger.info(f"Created competition {record['id']} for event {event_id}")

        return ActionResult.ok(rows[0] if rows else record, "Competition created successfully")

    except ServiceError as e:
        return e.to_result()
    except PostgrestError as e:
        logger.error(f"Database error creating competition: {e}")
        return storage_failure(e, "Failed to create competition")


async def update_competition(
    postgrest_client: PostgrestClient,
    competition_id: str,
    updates: Dict[str, Any],
) -> ActionResult:
    """
    Partially update a competition.

    Only title, description, fee and is_published can be changed here.

    Returns:
        ActionResult with the updated row; ``not_found`` for an unknown ID
    """
    try:
        unknown = sorted(set(updates) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError.for_field(
                unknown[0], f"Field(s) cannot be updated: {', '.join(unknown)}"
            )
        if not updates:
            raise ValidationError("No fields to update")

        data = dict(updates)
        if "title" in data:
            data["title"] = _check_title(data["title"])
        if "fee" in data:
            _check_fee(data["fee"])
        if "is_published" in data and not isinstance(data["is_published"], bool):
            raise ValidationError.for_field("is_published", "Published must be true or false")
        data["updated_at"] = _now()

        rows = await postgrest_client.tables.update(
            "competitions", data, filters={"id": eq(competition_id)}
        )
        if not rows:
            raise NotFoundError(f"Competition {competition_id} not found")

        logger.info(f"Updated competition {competition_id}: {sorted(updates)}")

        return ActionResult.ok(rows[0], "Competition updated successfully")

    except ServiceError as e:
        return e.to_result()
    except PostgrestError as e:
        logger.error(f"Database error updating competition {competition_id}: {e}")
        return storage_failure(e, "Failed to update competition")


async def set_competition_published(
    postgrest_client: PostgrestClient,
    competition_id: str,
    is_published: bool,
) -> ActionResult:
    """Publish or unpublish a competition."""
    result = await update_competition(
        postgrest_client, competition_id, {"is_published": is_published}
    )
    if result.success:
        result.message = (
            f"Competition {'published' if is_published else 'unpublished'} successfully"
        )
    return result


async def delete_competition(
    postgrest_client: PostgrestClient,
    competition_id: str,
) -> ActionResult:
    """
    Permanently delete a competition.

    A competition that already has registrations is not deleted; unpublish it
    instead so the registrations keep their competition.

    Returns:
        ActionResult with the deleted row
    """
    try:
        await _get_competition(postgrest_client, competition_id)

        registrations = await postgrest_client.tables.select(
            "competitions_participants",
            columns="id",
            filters={"competition_id": eq(competition_id)},
            limit=1,
        )
        if registrations:
            raise ValidationError.for_field(
                "competition_id",
                "Competition has registrations and cannot be deleted; unpublish it instead",
            )

        rows = await postgrest_client.tables.delete(
            "competitions", filters={"id": eq(competition_id)}
        )

        logger.info(f"Deleted competition {competition_id}")

        return ActionResult.ok(rows[0] if rows else None, "Competition deleted successfully")

    except ServiceError as e:
        return e.to_result()
    except PostgrestError as e:
        logger.error(f"Database error deleting competition {competition_id}: {e}")
        return storage_failure(e, "Failed to delete competition")


async def reorder_competitions(
    postgrest_client: PostgrestClient,
    event_id: str,
    ordered_ids: List[str],
) -> ActionResult:
    """
    Put an event's competitions in the given order.

    ``ordered_ids`` must list every competition of the event exactly once.
    The competitions get display_order 1..N in that order, written as a
    single upsert.

    Returns:
        ActionResult with the competitions in their new order
    """
    try:
        current = await postgrest_client.tables.select(
            "competitions", filters={"event_id": eq(event_id)}, order=COMPETITION_ORDER
        )
        by_id = {row["id"]: row for row in current}

        duplicates = sorted({cid for cid in ordered_ids if ordered_ids.count(cid) > 1})
        missing = [cid for cid in by_id if cid not in ordered_ids]
        foreign = [cid for cid in ordered_ids if cid not in by_id]

        problems = []
        if duplicates:
            problems.append(f"repeated: {', '.join(duplicates)}")
        if missing:
            problems.append(f"missing: {', '.join(missing)}")
        if foreign:
            problems.append(f"not in this event: {', '.join(foreign)}")
        if problems:
            raise ValidationError.for_field(
                "competition_ids",
                "Order must list every competition of the event exactly once ("
                + "; ".join(problems)
                + ")",
            )

        if not ordered_ids:
            return ActionResult.ok([], "Competition order updated successfully")

        now = _now()
        reordered = [
            {**by_id[cid], "display_order": position, "updated_at": now}
            for position, cid in enumerate(ordered_ids, start=1)
        ]

        rows = await postgrest_client.tables.upsert("competitions", reordered, on_conflict="id")

        logger.info(f"Reordered {len(reordered)} competitions of event {event_id}")

        rows = sorted(rows or reordered, key=lambda row: row["display_order"])
        return ActionResult.ok(rows, "Competition order updated successfully")

    except ServiceError as e:
        return e.to_result()
    except PostgrestError as e:
        logger.error(f"Database error reordering competitions of event {event_id}: {e}")
        return storage_failure(e, "Failed to update competition order")
