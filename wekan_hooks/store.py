"""Store adapter over Wekan's MongoDB collections."""

import logging
import secrets
from datetime import UTC, datetime
from typing import Protocol

import pymongo
from pymongo import MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .errors import NotFoundError, StoreError
from .models import Card

logger = logging.getLogger("wekan_hooks.store")

# Alphabet and length of Wekan's document ids
ID_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ID_LENGTH = 17


def new_id() -> str:
    """Generate a random document id in Wekan's format."""
    return "".join(secrets.choice(ID_CHARS) for _ in range(ID_LENGTH))


class Store(Protocol):
    """Operations the hooks need from the board's persistent store.

    Lookups raise NotFoundError when the document does not exist and
    StoreError when the store itself fails, so callers can tell them apart.
    """

    def find_card(self, card_id: str) -> Card: ...

    def find_board_id(self, title: str) -> str: ...

    def find_custom_field_id(self, name: str, board_id: str) -> str: ...

    def set_custom_field(self, card_id: str, field_id: str, value: str) -> None: ...

    def upsert_checklist_item(
        self, card_id: str, checklist_title: str, item_title: str, is_finished: bool
    ) -> None: ...


class MongoStore:
    """
    Store backed by the Wekan MongoDB database.

    Every operation runs under a client-side timeout. Find-or-create of
    checklists and checklist items is a single upsert keyed on the
    composite key, so repeated deliveries never insert a second document.
    """

    def __init__(self, db: Database, timeout: float = 5.0):
        """
        Initialize the store.

        Args:
            db: The Wekan database handle
            timeout: Per-operation timeout in seconds (default 5)
        """
        self.db = db
        self.timeout = timeout

    @classmethod
    def connect(cls, mongo_url: str, database: str = "wekan", timeout: float = 5.0) -> "MongoStore":
        """Connect to MongoDB and return a store for the given database."""
        client: MongoClient = MongoClient(
            mongo_url,
            serverSelectionTimeoutMS=int(timeout * 1000),
            connectTimeoutMS=int(timeout * 1000),
        )
        logger.info(f"Using MongoDB database '{database}'")
        return cls(client[database], timeout=timeout)

    def _find_id(self, collection: str, query: dict, kind: str, key: str) -> str:
        try:
            with pymongo.timeout(self.timeout):
                doc = self.db[collection].find_one(query, {"_id": 1})
        except PyMongoError as e:
            raise StoreError(f"error searching {kind} {key}", e) from e
        if doc is None:
            raise NotFoundError(kind, key)
        return doc["_id"]

    def find_card(self, card_id: str) -> Card:
        try:
            with pymongo.timeout(self.timeout):
                doc = self.db["cards"].find_one({"_id": card_id})
        except PyMongoError as e:
            raise StoreError(f"error searching card {card_id}", e) from e
        if doc is None:
            raise NotFoundError("card", card_id)
        return Card.from_document(doc)

    def find_board_id(self, title: str) -> str:
        return self._find_id("boards", {"title": title}, "board", title)

    def find_custom_field_id(self, name: str, board_id: str) -> str:
        return self._find_id(
            "customFields", {"name": name, "boardIds": board_id}, "custom field", name
        )

    def set_custom_field(self, card_id: str, field_id: str, value: str) -> None:
        """
        Set a custom-field value on a card.

        Overwrites the value in place when the card already has an entry
        for the field, otherwise appends a new entry.

        Raises:
            NotFoundError: If the card does not exist
            StoreError: If the update fails
        """
        cards = self.db["cards"]
        try:
            with pymongo.timeout(self.timeout):
                result = cards.update_one(
                    {"_id": card_id, "customFields._id": field_id},
                    {"$set": {"customFields.$.value": value}},
                )
                if result.matched_count:
                    logger.debug(f"Updated field {field_id} on card {card_id}")
                    return
                result = cards.update_one(
                    {"_id": card_id},
                    {"$push": {"customFields": {"_id": field_id, "value": value}}},
                )
        except PyMongoError as e:
            raise StoreError(f"error updating field {field_id} on card {card_id}", e) from e
        if not result.matched_count:
            raise NotFoundError("card", card_id)
        logger.debug(f"Added field {field_id} to card {card_id}")

    def _upsert_checklist(self, card_id: str, title: str) -> str:
        doc = self.db["checklists"].find_one_and_update(
            {"cardId": card_id, "title": title},
            {"$setOnInsert": {"_id": new_id(), "createdAt": datetime.now(UTC)}},
            projection={"_id": 1},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return doc["_id"]

    def upsert_checklist_item(
        self, card_id: str, checklist_title: str, item_title: str, is_finished: bool
    ) -> None:
        """
        Create or update a checklist item on a card.

        The checklist is looked up by (card, title) and the item by
        (checklist, title); each is created only if missing. An existing
        item only has its completion flag updated.

        Args:
            card_id: Card owning the checklist
            checklist_title: Title of the checklist (created if missing)
            item_title: Title of the item (created if missing)
            is_finished: Completion flag to store
        """
        try:
            with pymongo.timeout(self.timeout):
                checklist_id = self._upsert_checklist(card_id, checklist_title)
                self.db["checklistItems"].update_one(
                    {"cardId": card_id, "checklistId": checklist_id, "title": item_title},
                    {
                        "$set": {"isFinished": is_finished},
                        "$setOnInsert": {"_id": new_id(), "createdAt": datetime.now(UTC)},
                    },
                    upsert=True,
                )
        except PyMongoError as e:
            raise StoreError(
                f"error upserting item '{item_title}' of checklist '{checklist_title}' "
                f"on card {card_id}",
                e,
            ) from e
        logger.debug(
            f"Checklist '{checklist_title}' on card {card_id}: "
            f"'{item_title}' finished={is_finished}"
        )
