# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from app import create_app
from app.core.bridge_client import BridgeClient
from app.core.config import Settings
from app.core.connection import ConnectionManager, ConnectionState
from app.core.ledger import MessageLedger
from app.core.pacing import Pacer
from app.services.webhook_service import WebhookForwarder


@pytest.fixture
def test_settings(monkeypatch):
    """Settings built from a known test environment"""
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("WEBHOOK_URL_TEST", "https://n8n.example.com/webhook/test")
    monkeypatch.setenv("WEBHOOK_URL_PROD", "https://n8n.example.com/webhook/prod")
    monkeypatch.setenv("BRIDGE_URL", "http://bridge.test")
    monkeypatch.delenv("BRIDGE_TOKEN", raising=False)
    monkeypatch.setenv("DELETE_PACING_SECONDS", "0")
    monkeypatch.setenv("RECONNECT_DELAY_SECONDS", "0")
    return Settings()


@pytest.fixture
def mock_bridge():
    """Mock bridge client for tests."""
    bridge = AsyncMock(spec=BridgeClient)
    bridge.send_text = AsyncMock(return_value={"id": "ABC", "timestamp": 1700000000000})
    bridge.delete_message = AsyncMock(return_value={"success": True})
    bridge.status = AsyncMock(return_value={"connected": True})
    bridge.reconnect = AsyncMock(return_value={"success": True})
    return bridge


@pytest.fixture
def connection(mock_bridge):
    """Connection manager that already has a live session"""
    manager = ConnectionManager(mock_bridge, reconnect_delay=0)
    manager.state = ConnectionState.CONNECTED
    return manager


@pytest.fixture
def disconnected(connection):
    connection.state = ConnectionState.DISCONNECTED
    return connection


@pytest.fixture
def ledger():
    return MessageLedger()


class CountingPacer(Pacer):
    """Zero-delay pacer that remembers how often it was asked to wait"""

    def __init__(self):
        super().__init__(0)
        self.waits = 0

    async def wait(self) -> None:
        self.waits += 1
        await super().wait()


@pytest.fixture
def pacer():
    return CountingPacer()


@pytest.fixture
def forwarder():
    return MagicMock(spec=WebhookForwarder)


@pytest.fixture
def app(test_settings, connection, ledger, pacer, forwarder):
    """Create application for testing."""
    return create_app(
        settings=test_settings,
        connection=connection,
        ledger=ledger,
        pacer=pacer,
        forwarder=forwarder,
    )


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return TestClient(app)


@pytest.fixture
def upsert_event():
    """Generate a bridge messages.upsert event."""

    def _create_event(sender="111@s.whatsapp.net", text="hi", message_id="IN1", extended=False):
        content = (
            {"extendedTextMessage": {"text": text}} if extended else {"conversation": text}
        )
        return {
            "event": "messages.upsert",
            "data": {
                "messages": [
                    {
                        "key": {"remoteJid": sender, "fromMe": False, "id": message_id},
                        "message": content,
                    }
                ]
            },
        }

    return _create_event
