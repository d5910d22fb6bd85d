"""Shared fixtures for wekan-hooks tests."""

import pytest

from wekan_hooks.hooks import HookContext
from wekan_hooks.resolver import FieldResolver
from wekan_hooks.tests.fakes import BOARD_ID, FIELD_IDS, OTHER_BOARD_ID, FakeStore


@pytest.fixture
def store() -> FakeStore:
    """A store with the Materiais board and all its custom fields."""
    s = FakeStore()
    s.boards["Materiais"] = BOARD_ID
    s.boards["Outro"] = OTHER_BOARD_ID
    for name, field_id in FIELD_IDS.items():
        s.custom_fields.append({"_id": field_id, "name": name, "boardIds": [BOARD_ID]})
    return s


@pytest.fixture
def resolver(store: FakeStore) -> FieldResolver:
    return FieldResolver(store)


@pytest.fixture
def ctx(store: FakeStore, resolver: FieldResolver) -> HookContext:
    return HookContext(store=store, resolver=resolver)
