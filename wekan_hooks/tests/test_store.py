"""Tests for MongoStore against mocked collections."""

from unittest.mock import MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from wekan_hooks.errors import NotFoundError, StoreError
from wekan_hooks.store import ID_CHARS, ID_LENGTH, MongoStore, new_id


@pytest.fixture
def db() -> dict[str, MagicMock]:
    """Mocked Wekan database, one MagicMock per collection."""
    return {
        name: MagicMock()
        for name in ("cards", "boards", "customFields", "checklists", "checklistItems")
    }


@pytest.fixture
def mongo_store(db) -> MongoStore:
    return MongoStore(db, timeout=1.0)


def test_new_id_format():
    """Test generated ids look like Wekan ids."""
    ids = {new_id() for _ in range(20)}
    assert len(ids) == 20
    for i in ids:
        assert len(i) == ID_LENGTH
        assert set(i) <= set(ID_CHARS)


class TestLookups:
    """Tests for find_* operations."""

    def test_find_card(self, db, mongo_store):
        """Test a card document is returned as a Card."""
        db["cards"].find_one.return_value = {"_id": "c1", "title": "HD", "parentId": "p1"}
        card = mongo_store.find_card("c1")
        assert card.id == "c1"
        assert card.parent_id == "p1"
        db["cards"].find_one.assert_called_once_with({"_id": "c1"})

    def test_find_card_not_found(self, db, mongo_store):
        """Test a missing card raises NotFoundError."""
        db["cards"].find_one.return_value = None
        with pytest.raises(NotFoundError) as exc_info:
            mongo_store.find_card("c1")
        assert exc_info.value.kind == "card"
        assert exc_info.value.key == "c1"

    def test_find_card_store_error(self, db, mongo_store):
        """Test driver errors are wrapped in StoreError."""
        db["cards"].find_one.side_effect = ServerSelectionTimeoutError("no servers")
        with pytest.raises(StoreError, match="no servers"):
            mongo_store.find_card("c1")

    def test_find_board_id(self, db, mongo_store):
        """Test boards are looked up by title."""
        db["boards"].find_one.return_value = {"_id": "b1"}
        assert mongo_store.find_board_id("Materiais") == "b1"
        db["boards"].find_one.assert_called_once_with({"title": "Materiais"}, {"_id": 1})

    def test_find_board_not_found(self, db, mongo_store):
        """Test a missing board raises NotFoundError."""
        db["boards"].find_one.return_value = None
        with pytest.raises(NotFoundError, match="board not found: Materiais"):
            mongo_store.find_board_id("Materiais")

    def test_find_custom_field_id(self, db, mongo_store):
        """Test custom fields are matched by name and board membership."""
        db["customFields"].find_one.return_value = {"_id": "f1"}
        assert mongo_store.find_custom_field_id("ipl", "b1") == "f1"
        db["customFields"].find_one.assert_called_once_with(
            {"name": "ipl", "boardIds": "b1"}, {"_id": 1}
        )


class TestSetCustomField:
    """Tests for set_custom_field."""

    def test_updates_existing_entry(self, db, mongo_store):
        """Test an existing entry is updated in place."""
        db["cards"].update_one.return_value = MagicMock(matched_count=1)
        mongo_store.set_custom_field("c1", "f1", "v")
        db["cards"].update_one.assert_called_once_with(
            {"_id": "c1", "customFields._id": "f1"},
            {"$set": {"customFields.$.value": "v"}},
        )

    def test_pushes_new_entry(self, db, mongo_store):
        """Test a missing entry is appended."""
        db["cards"].update_one.side_effect = [MagicMock(matched_count=0), MagicMock(matched_count=1)]
        mongo_store.set_custom_field("c1", "f1", "v")
        assert db["cards"].update_one.call_args_list[1].args == (
            {"_id": "c1"},
            {"$push": {"customFields": {"_id": "f1", "value": "v"}}},
        )

    def test_missing_card(self, db, mongo_store):
        """Test updating a missing card raises NotFoundError."""
        db["cards"].update_one.return_value = MagicMock(matched_count=0)
        with pytest.raises(NotFoundError):
            mongo_store.set_custom_field("c1", "f1", "v")


class TestUpsertChecklistItem:
    """Tests for upsert_checklist_item."""

    def test_upserts_checklist_then_item(self, db, mongo_store):
        """Test both documents are found-or-created by their composite key."""
        db["checklists"].find_one_and_update.return_value = {"_id": "cl1"}

        mongo_store.upsert_checklist_item("parent", "Pronto", "T", True)

        args, kwargs = db["checklists"].find_one_and_update.call_args
        assert args[0] == {"cardId": "parent", "title": "Pronto"}
        assert "_id" in args[1]["$setOnInsert"]
        assert kwargs["upsert"] is True

        args, kwargs = db["checklistItems"].update_one.call_args
        assert args[0] == {"cardId": "parent", "checklistId": "cl1", "title": "T"}
        assert args[1]["$set"] == {"isFinished": True}
        assert "_id" in args[1]["$setOnInsert"]
        assert kwargs["upsert"] is True

    def test_store_error(self, db, mongo_store):
        """Test driver errors are wrapped in StoreError."""
        db["checklists"].find_one_and_update.side_effect = ServerSelectionTimeoutError("down")
        with pytest.raises(StoreError, match="Pronto"):
            mongo_store.upsert_checklist_item("parent", "Pronto", "T", False)
        db["checklistItems"].update_one.assert_not_called()
