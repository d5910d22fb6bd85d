"""Tests for the webhook HTTP listener."""

import logging
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from wekan_hooks.dispatcher import Dispatcher
from wekan_hooks.events import HookMessage
from wekan_hooks.server import create_app, process_message


def _payload(description="act-moveCard", card_id="card1", **extra):
    return {
        "text": "user moved card",
        "cardId": card_id,
        "listId": "list1",
        "boardId": "board1",
        "user": "alice",
        "card": "HD",
        "description": description,
        **extra,
    }


@pytest.fixture
def dispatcher() -> MagicMock:
    return MagicMock(spec=Dispatcher)


@pytest.fixture
def client(dispatcher) -> TestClient:
    return TestClient(create_app(dispatcher))


class TestWebhookEndpoint:
    """Tests for POST / and POST /webhook."""

    @pytest.mark.parametrize("path", ["/", "/webhook"])
    def test_dispatches_handled_event(self, client, dispatcher, path):
        """Test a handled event is acknowledged and dispatched."""
        response = client.post(path, json=_payload())
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        dispatcher.dispatch.assert_called_once_with("act-moveCard", "card1")

    def test_ignores_unhandled_event(self, client, dispatcher):
        """Test other event kinds are acknowledged but not dispatched."""
        response = client.post("/", json=_payload(description="act-addChecklist"))
        assert response.status_code == 200
        dispatcher.dispatch.assert_not_called()

    def test_invalid_body_is_acknowledged(self, client, dispatcher):
        """Test an undecodable body still gets a 200."""
        response = client.post("/", content=b"not json", headers={"content-type": "application/json"})
        assert response.status_code == 200
        dispatcher.dispatch.assert_not_called()

    def test_dispatch_error_is_not_returned(self, client, dispatcher, caplog):
        """Test processing errors are logged, not sent back to Wekan."""
        dispatcher.dispatch.side_effect = RuntimeError("mongo down")
        with caplog.at_level(logging.ERROR, logger="wekan_hooks.server"):
            response = client.post("/", json=_payload(description="act-createCard"))
        assert response.status_code == 200
        assert "Error processing act-createCard for card card1" in caplog.text

    def test_health(self, client):
        """Test the health endpoint."""
        assert client.get("/health").json() == {"status": "ok"}


class TestProcessMessage:
    """Tests for process_message."""

    def test_missing_card_id(self, dispatcher):
        """Test an event without a card id is dropped."""
        process_message(dispatcher, HookMessage(description="act-moveCard"))
        dispatcher.dispatch.assert_not_called()

    def test_extra_fields_ignored(self, dispatcher):
        """Test unknown envelope fields do not break decoding."""
        message = HookMessage.model_validate(_payload(commentId="x", swimlaneId=None))
        process_message(dispatcher, message)
        dispatcher.dispatch.assert_called_once_with("act-moveCard", "card1")
