"""
Tests for Competition Management Service
"""

from unittest.mock import AsyncMock

import pytest
from integrations.postgrest.exceptions import PostgrestError
from services.competition_service import (
    create_competition,
    delete_competition,
    list_event_competitions,
    reorder_competitions,
    set_competition_published,
    update_competition,
)

EVENT_ID = "event-1"


def seed(store):
    store.tables.data.update(
        {
            "events": [{"id": EVENT_ID}, {"id": "event-2"}],
            "competitions": [
                {"id": "c1", "event_id": EVENT_ID, "title": "Quiz", "fee": 0, "is_published": True, "display_order": 1, "created_at": "2024-01-01"},
                {"id": "c2", "event_id": EVENT_ID, "title": "Olympiad", "fee": 100, "is_published": False, "display_order": 2, "created_at": "2024-01-02"},
                {"id": "c3", "event_id": EVENT_ID, "title": "Debate", "fee": 50, "is_published": True, "display_order": 2, "created_at": "2024-01-03"},
                {"id": "x1", "event_id": "event-2", "title": "Other", "fee": 0, "is_published": True, "display_order": 1, "created_at": "2024-01-01"},
            ],
            "competitions_participants": [
                {"id": "r1", "participant_id": "p1", "competition_id": "c1", "status": "pending"},
            ],
        }
    )


def ids(rows):
    return [row["id"] for row in rows]


class TestListEventCompetitions:
    """Test list_event_competitions()"""

    @pytest.mark.asyncio
    async def test_ordered_with_ties_by_creation(self, store):
        seed(store)

        result = await list_event_competitions(store, EVENT_ID)

        assert result.success is True
        assert ids(result.data) == ["c1", "c2", "c3"]

    @pytest.mark.asyncio
    async def test_published_only(self, store):
        seed(store)

        result = await list_event_competitions(store, EVENT_ID, published_only=True)

        assert ids(result.data) == ["c1", "c3"]


class TestCreateCompetition:
    """Test create_competition()"""

    @pytest.mark.asyncio
    async def test_appends_after_last(self, store):
        seed(store)

        result = await create_competition(store, EVENT_ID, title="  Robotics ", fee=200)

        assert result.success is True
        assert result.data["title"] == "Robotics"
        assert result.data["display_order"] == 3
        assert result.data["is_published"] is False

    @pytest.mark.asyncio
    async def test_first_competition_of_event(self, store):
        seed(store)
        store.tables.data["events"].append({"id": "event-3"})

        result = await create_competition(store, "event-3", title="Quiz")

        assert result.data["display_order"] == 1

    @pytest.mark.asyncio
    async def test_description_passed_through(self, store):
        seed(store)
        document = {"type": "doc", "content": [{"type": "paragraph"}]}

        result = await create_competition(store, EVENT_ID, title="Art", description=document)

        assert result.data["description"] == document

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fee", [-1, None, "10", True])
    async def test_invalid_fee(self, store, fee):
        seed(store)

        result = await create_competition(store, EVENT_ID, title="Quiz", fee=fee)

        assert result.success is False
        assert result.errors[0].field == "fee"

    @pytest.mark.asyncio
    async def test_blank_title(self, store):
        seed(store)

        result = await create_competition(store, EVENT_ID, title="   ")

        assert result.success is False
        assert result.errors[0].field == "title"

    @pytest.mark.asyncio
    async def test_unknown_event(self, store):
        seed(store)

        result = await create_competition(store, "missing", title="Quiz")

        assert result.success is False
        assert result.error_code == "not_found"

    @pytest.mark.asyncio
    async def test_explicit_free_position(self, store):
        seed(store)

        result = await create_competition(store, EVENT_ID, title="Quiz Bowl", display_order=5)

        assert result.success is True
        assert result.data["display_order"] == 5

    @pytest.mark.asyncio
    async def test_explicit_position_already_taken(self, store):
        seed(store)

        result = await create_competition(store, EVENT_ID, title="Quiz Bowl", display_order=1)

        assert result.success is False
        assert result.error_code == "validation_error"
        assert result.errors[0].field == "display_order"
        assert len([row for row in store.tables.data["competitions"] if row["event_id"] == EVENT_ID]) == 3


class TestUpdateCompetition:
    """Test update_competition() and set_competition_published()"""

    @pytest.mark.asyncio
    async def test_partial_update(self, store):
        seed(store)

        result = await update_competition(store, "c2", {"fee": 120})

        assert result.success is True
        assert result.data["fee"] == 120
        assert result.data["title"] == "Olympiad"
        assert "updated_at" in result.data

    @pytest.mark.asyncio
    async def test_display_order_not_updatable(self, store):
        seed(store)

        result = await update_competition(store, "c2", {"display_order": 9})

        assert result.success is False
        assert result.error_code == "validation_error"

    @pytest.mark.asyncio
    async def test_empty_update(self, store):
        seed(store)

        result = await update_competition(store, "c2", {})

        assert result.success is False
        assert result.error_code == "validation_error"

    @pytest.mark.asyncio
    async def test_null_published_rejected(self, store):
        seed(store)

        result = await update_competition(store, "c2", {"is_published": None})

        assert result.success is False
        assert result.errors[0].field == "is_published"
        assert ("update", "competitions") not in store.tables.calls

    @pytest.mark.asyncio
    async def test_unknown_competition(self, store):
        seed(store)

        result = await update_competition(store, "missing", {"title": "x"})

        assert result.error_code == "not_found"

    @pytest.mark.asyncio
    async def test_publish(self, store):
        seed(store)

        result = await set_competition_published(store, "c2", True)

        assert result.success is True
        assert result.data["is_published"] is True
        assert result.message == "Competition published successfully"


class TestDeleteCompetition:
    """Test delete_competition()"""

    @pytest.mark.asyncio
    async def test_deletes_unused_competition(self, store):
        seed(store)

        result = await delete_competition(store, "c2")

        assert result.success is True
        assert "c2" not in ids(store.tables.data["competitions"])

    @pytest.mark.asyncio
    async def test_refuses_competition_with_registrations(self, store):
        seed(store)

        result = await delete_competition(store, "c1")

        assert result.success is False
        assert result.error_code == "validation_error"
        assert "unpublish" in result.error
        assert "c1" in ids(store.tables.data["competitions"])

    @pytest.mark.asyncio
    async def test_unknown_competition(self, store):
        seed(store)

        result = await delete_competition(store, "missing")

        assert result.error_code == "not_found"


class TestReorderCompetitions:
    """Test reorder_competitions()"""

    @pytest.mark.asyncio
    async def test_persists_contiguous_order(self, store):
        seed(store)

        result = await reorder_competitions(store, EVENT_ID, ["c3", "c1", "c2"])

        assert result.success is True
        assert [(row["id"], row["display_order"]) for row in result.data] == [
            ("c3", 1),
            ("c1", 2),
            ("c2", 3),
        ]
        listed = await list_event_competitions(store, EVENT_ID)
        assert ids(listed.data) == ["c3", "c1", "c2"]
        assert store.tables.calls.count(("upsert", "competitions")) == 1

    @pytest.mark.asyncio
    async def test_other_events_untouched(self, store):
        seed(store)

        await reorder_competitions(store, EVENT_ID, ["c2", "c3", "c1"])

        other = next(row for row in store.tables.data["competitions"] if row["id"] == "x1")
        assert other["display_order"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "ordered,problem",
        [
            (["c1", "c2"], "missing: c3"),
            (["c1", "c2", "c3", "x1"], "not in this event: x1"),
            (["c1", "c2", "c3", "c1"], "repeated: c1"),
        ],
    )
    async def test_requires_exact_permutation(self, store, ordered, problem):
        seed(store)

        result = await reorder_competitions(store, EVENT_ID, ordered)

        assert result.success is False
        assert result.errors[0].field == "competition_ids"
        assert problem in result.error
        assert ("upsert", "competitions") not in store.tables.calls

    @pytest.mark.asyncio
    async def test_storage_error(self):
        mock_client = AsyncMock()
        mock_client.tables.select.return_value = [{"id": "c1", "display_order": 1}]
        mock_client.tables.upsert.side_effect = PostgrestError("deadlock detected")

        result = await reorder_competitions(mock_client, EVENT_ID, ["c1"])

        assert result.success is False
        assert result.error_code == "storage_error"
        assert result.error == "deadlock detected"
