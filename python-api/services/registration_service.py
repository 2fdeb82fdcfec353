"""
Event Registration Service

Business logic for the public registration flow: one participant row plus one
pending competition registration per selected competition.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Union
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from integrations.postgrest.client import PostgrestClient
from integrations.postgrest.exceptions import PostgrestError, PostgrestTimeoutError
from integrations.postgrest.filters import eq
from models.registration import RegistrationForm, RegistrationStatus
from models.results import ActionResult, FieldError, field_errors_from_pydantic
from services.errors import NotFoundError, ServiceError, ValidationError, storage_failure
from services.fee_calculator import compute_total_fee, is_payment_required

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Registration successful, organizers will verify and reach out to you shortly"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RegistrationService:
    """Service for registering participants to an event's competitions."""

    def __init__(self, postgrest_client: PostgrestClient):
        """
        Initialize registration service.

        Args:
            postgrest_client: PostgREST client instance
        """
        self.db = postgrest_client

    async def submit_registration(
        self,
        event_id: str,
        form_data: Union[RegistrationForm, Mapping[str, Any]],
    ) -> ActionResult:
        """
        Register a participant for one or more competitions of an event.

        Steps:
            1. Validate the form (field rules, class range for the level)
            2. Load the event's fee schedule, reject competitions that are not
               open for registration in this event
            3. Recompute the total fee and require payment details when it is
               above zero (the client's own check is not trusted)
            4. Insert the participant row
            5. Insert one "pending" registration per competition in one statement;
               if that fails, the participant row from step 4 is deleted again,
               unless the insert timed out and its outcome is unknown

        Args:
            event_id: Event the competitions belong to
            form_data: RegistrationForm or raw form mapping

        Returns:
            ActionResult with ``data`` = {"participant", "registrations", "total_fee"}
        """
        try:
            form = self._parse_form(form_data)
            catalog = await self._load_open_competitions(event_id)
            self._check_competitions(form, catalog)

            total_fee = compute_total_fee(form.competitions, catalog)
            payment_required = is_payment_required(total_fee)
            if payment_required:
                self._check_payment(form)

            participant = await self._insert_participant(form, payment_required)
            registrations = await self._insert_registrations(participant, form.competitions)

            logger.info(
                f"Registered participant {participant['id']} for {len(registrations)} "
                f"competition(s) of event {event_id} (total fee {total_fee})"
            )

            return ActionResult.ok(
                {
                    "participant": participant,
                    "registrations": registrations,
                    "total_fee": total_fee,
                },
                SUCCESS_MESSAGE,
            )

        except ServiceError as e:
            return e.to_result()
        except PostgrestError as e:
            logger.error(f"Database error registering for event {event_id}: {e}")
            return storage_failure(e, "Failed to register for event")

    def _parse_form(self, form_data: Union[RegistrationForm, Mapping[str, Any]]) -> RegistrationForm:
        if isinstance(form_data, RegistrationForm):
            # re-run validators on data that may have been built without them
            form_data = form_data.model_dump(by_alias=True)
        try:
            return RegistrationForm.model_validate(form_data)
        except PydanticValidationError as e:
            raise ValidationError(
                "Please correct the highlighted fields",
                errors=field_errors_from_pydantic(e, skip_prefix=()),
            ) from e

    async def _load_open_competitions(self, event_id: str) -> list[dict[str, Any]]:
        events = await self.db.tables.select(
            "events", columns="id", filters={"id": eq(event_id)}, limit=1
        )
        if not events:
            raise NotFoundError(f"Event {event_id} not found")

        return await self.db.tables.select(
            "competitions",
            columns="id,fee,is_published",
            filters={"event_id": eq(event_id), "is_published": eq(True)},
        )

    def _check_competitions(self, form: RegistrationForm, catalog: list[dict[str, Any]]) -> None:
        open_ids = {competition["id"] for competition in catalog}
        unknown = [competition_id for competition_id in form.competitions if competition_id not in open_ids]
        if unknown:
            raise ValidationError.for_field(
                "competitions",
                "These competitions are not open for registration in this event: "
                + ", ".join(unknown),
            )

    def _check_payment(self, form: RegistrationForm) -> None:
        errors = []
        if not form.transaction_id:
            errors.append(
                FieldError(
                    field="transaction_id",
                    message="Transaction ID is required for paid competitions",
                )
            )
        if form.payment_provider is None:
            errors.append(
                FieldError(
                    field="payment_provider",
                    message="Payment provider is required for paid competitions",
                )
            )
        if errors:
            raise ValidationError("Payment details are required for paid competitions", errors)

    async def _insert_participant(self, form: RegistrationForm, payment_required: bool) -> dict[str, Any]:
        now = utc_now()
        record = {
            "id": str(uuid4()),
            "name": form.name,
            "institution": form.institution,
            "class": form.class_,
            "id_at_institution": form.id_at_institution,
            "email": form.email,
            "phone": form.phone,
            "note": form.note or "",
            # payment evidence is only kept when something is owed
            "transaction_id": form.transaction_id if payment_required else None,
            "payment_provider": form.payment_provider.value
            if payment_required and form.payment_provider
            else None,
            "created_at": now,
            "updated_at": now,
        }

        rows = await self.db.tables.insert("participants", [record])
        return rows[0] if rows else record

    async def _insert_registrations(
        self, participant: dict[str, Any], competition_ids: list[str]
    ) -> list[dict[str, Any]]:
        now = utc_now()
        records = [
            {
                "id": str(uuid4()),
                "participant_id": participant["id"],
                "competition_id": competition_id,
                "status": RegistrationStatus.PENDING.value,
                "created_at": now,
                "updated_at": now,
            }
            for competition_id in competition_ids
        ]

        try:
            rows = await self.db.tables.insert("competitions_participants", records)
        except PostgrestTimeoutError:
            # the insert may have been committed; the participant row must stay
            logger.warning(
                f"Registration insert for participant {participant['id']} timed out, "
                "outcome unknown"
            )
            raise
        except PostgrestError:
            await self._discard_participant(participant["id"])
            raise

        return rows or records

    async def _discard_participant(self, participant_id: str) -> None:
        try:
            await self.db.tables.delete("participants", filters={"id": eq(participant_id)})
            logger.warning(
                f"Removed participant {participant_id} after registration insert failed"
            )
        except PostgrestError as e:
            logger.error(
                f"Could not remove participant {participant_id} after registration insert "
                f"failed, row is orphaned: {e}"
            )
