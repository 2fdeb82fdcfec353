"""
Tests for the Event Registration Service

Uses the in-memory tables fixture so the rows written can be inspected.
"""

from unittest.mock import AsyncMock

import pytest
from integrations.postgrest.exceptions import PostgrestError, PostgrestTimeoutError
from models.registration import RegistrationForm
from services.registration_service import SUCCESS_MESSAGE, RegistrationService

EVENT_ID = "event-1"


def seed(store):
    store.tables.data.update(
        {
            "events": [{"id": EVENT_ID}, {"id": "event-2"}],
            "competitions": [
                {"id": "c1", "event_id": EVENT_ID, "fee": 0, "is_published": True},
                {"id": "c2", "event_id": EVENT_ID, "fee": 100, "is_published": True},
                {"id": "c3", "event_id": EVENT_ID, "fee": 50, "is_published": True},
                {"id": "hidden", "event_id": EVENT_ID, "fee": 0, "is_published": False},
                {"id": "other", "event_id": "event-2", "fee": 0, "is_published": True},
            ],
        }
    )


def form(**overrides):
    data = {
        "name": "A. Rahman",
        "institution": "ACPS",
        "level": "School",
        "class": 9,
        "id_at_institution": "S123",
        "email": "a@x.com",
        "competitions": ["c1"],
    }
    data.update(overrides)
    return data


class TestSubmitRegistration:
    """Test RegistrationService.submit_registration()"""

    @pytest.mark.asyncio
    async def test_free_registration_end_to_end(self, store):
        """Free competition: success, one pending registration, no payment needed"""
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(EVENT_ID, form())

        assert result.success is True
        assert result.message == SUCCESS_MESSAGE
        participant = result.data["participant"]
        assert participant["transaction_id"] is None
        assert participant["payment_provider"] is None
        assert result.data["total_fee"] == 0

        rows = store.tables.data["competitions_participants"]
        assert len(rows) == 1
        assert rows[0]["participant_id"] == participant["id"]
        assert rows[0]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_paid_registration_without_payment_writes_nothing(self, store):
        """Same person, paid competition, no transaction ID: rejected before any write"""
        seed(store)
        service = RegistrationService(store)
        await service.submit_registration(EVENT_ID, form())
        participants_before = list(store.tables.data["participants"])

        result = await service.submit_registration(EVENT_ID, form(competitions=["c2"]))

        assert result.success is False
        assert result.error_code == "validation_error"
        fields = {error.field for error in result.errors}
        assert fields == {"transaction_id", "payment_provider"}
        assert store.tables.data["participants"] == participants_before
        assert len(store.tables.data["competitions_participants"]) == 1

    @pytest.mark.asyncio
    async def test_missing_provider_only(self, store):
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(
            EVENT_ID, form(competitions=["c2"], transaction_id="TX1")
        )

        assert result.success is False
        assert [error.field for error in result.errors] == ["payment_provider"]
        assert "participants" not in store.tables.data

    @pytest.mark.asyncio
    async def test_batch_completeness(self, store):
        """N selected competitions produce exactly N pending rows for the new participant"""
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(
            EVENT_ID,
            form(
                competitions=["c1", "c2", "c3"],
                transaction_id="TX-9",
                payment_provider="BKash",
            ),
        )

        assert result.success is True
        assert result.data["total_fee"] == 150
        participant_id = result.data["participant"]["id"]
        rows = [
            row
            for row in store.tables.data["competitions_participants"]
            if row["participant_id"] == participant_id
        ]
        assert sorted(row["competition_id"] for row in rows) == ["c1", "c2", "c3"]
        assert {row["status"] for row in rows} == {"pending"}
        assert result.data["participant"]["transaction_id"] == "TX-9"
        assert result.data["participant"]["payment_provider"] == "BKash"

    @pytest.mark.asyncio
    async def test_payment_fields_dropped_when_free(self, store):
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(
            EVENT_ID, form(transaction_id="TX-1", payment_provider="BKash")
        )

        assert result.success is True
        assert result.data["participant"]["transaction_id"] is None

    @pytest.mark.asyncio
    async def test_duplicate_competition_ids_written_once(self, store):
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(EVENT_ID, form(competitions=["c1", "c1"]))

        assert result.success is True
        assert len(store.tables.data["competitions_participants"]) == 1

    @pytest.mark.asyncio
    async def test_accepts_validated_form_model(self, store):
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(EVENT_ID, RegistrationForm(**form()))

        assert result.success is True
        assert result.data["participant"]["class"] == 9

    @pytest.mark.asyncio
    async def test_unknown_event(self, store):
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration("missing", form())

        assert result.success is False
        assert result.error_code == "not_found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("competition_id", ["hidden", "other", "nope"])
    async def test_rejects_competitions_not_open_in_event(self, store, competition_id):
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(
            EVENT_ID, form(competitions=["c1", competition_id])
        )

        assert result.success is False
        assert result.error_code == "validation_error"
        assert result.errors[0].field == "competitions"
        assert competition_id in result.error
        assert "participants" not in store.tables.data

    @pytest.mark.asyncio
    async def test_field_errors_for_invalid_form(self, store):
        seed(store)
        service = RegistrationService(store)

        result = await service.submit_registration(
            EVENT_ID, form(name="", level="College", **{"class": 5}, competitions=[])
        )

        assert result.success is False
        assert result.error_code == "validation_error"
        fields = {error.field for error in result.errors}
        assert {"name", "class", "competitions"} <= fields
        class_error = next(error for error in result.errors if error.field == "class")
        assert class_error.message == "Class must be between 11 and 12 for College"
        assert store.tables.calls == []

    @pytest.mark.asyncio
    async def test_registration_insert_failure_removes_participant(self, store):
        """A failed registration batch must not leave the participant row behind"""
        seed(store)
        store.tables.fail[("insert", "competitions_participants")] = PostgrestError(
            "insert or update on table violates foreign key constraint", status_code=400
        )
        service = RegistrationService(store)

        result = await service.submit_registration(EVENT_ID, form())

        assert result.success is False
        assert result.error_code == "storage_error"
        assert "foreign key" in result.error
        assert store.tables.data["participants"] == []
        assert ("delete", "participants") in store.tables.calls

    @pytest.mark.asyncio
    async def test_participant_insert_failure_writes_nothing(self, store):
        seed(store)
        store.tables.fail[("insert", "participants")] = PostgrestError("boom", status_code=500)
        service = RegistrationService(store)

        result = await service.submit_registration(EVENT_ID, form())

        assert result.success is False
        assert result.error_code == "storage_error"
        assert "competitions_participants" not in store.tables.data

    @pytest.mark.asyncio
    async def test_timeout_reports_unknown_outcome(self):
        mock_client = AsyncMock()
        mock_client.tables.select.side_effect = PostgrestTimeoutError("Request timed out")
        service = RegistrationService(mock_client)

        result = await service.submit_registration(EVENT_ID, form())

        assert result.success is False
        assert result.error_code == "storage_error"
        assert "may or may not" in result.error

    @pytest.mark.asyncio
    async def test_registration_insert_timeout_keeps_participant(self, store):
        """A timed-out registration insert may have been committed, so nothing is rolled back"""
        seed(store)
        store.tables.fail[("insert", "competitions_participants")] = PostgrestTimeoutError(
            "Request timed out after 30.0s"
        )
        service = RegistrationService(store)

        result = await service.submit_registration(EVENT_ID, form())

        assert result.success is False
        assert result.error_code == "storage_error"
        assert "may or may not" in result.error
        assert len(store.tables.data["participants"]) == 1
        assert ("delete", "participants") not in store.tables.calls
