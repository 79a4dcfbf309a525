# tests/test_connection.py

import asyncio
import logging
import pytest
from app.core.bridge_client import BridgeClient
from app.core.connection import ConnectionManager, ConnectionState
from app.core.exceptions import BridgeError, AuthenticationRejected


@pytest.fixture
def manager(mock_bridge):
    return ConnectionManager(mock_bridge, reconnect_delay=0)


async def settle(manager):
    """Let a scheduled reconnect run to completion"""
    for _ in range(10):
        await asyncio.sleep(0)
        if manager._reconnect_task is None or manager._reconnect_task.done():
            break
    await asyncio.sleep(0)


def test_starts_disconnected(manager):
    assert manager.state == ConnectionState.DISCONNECTED
    assert manager.is_ready() is False


@pytest.mark.asyncio
async def test_start_connected(manager, mock_bridge):
    await manager.start()
    assert manager.state == ConnectionState.CONNECTED
    assert manager.is_ready() is True
    mock_bridge.status.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_waiting_for_qr(manager, mock_bridge, caplog):
    mock_bridge.status.return_value = {"connected": False, "qr": "2@abc+/="}

    with caplog.at_level(logging.INFO):
        await manager.start()

    assert manager.state == ConnectionState.CONNECTING
    assert manager.qr == "2@abc+/="
    assert "data=2%40abc%2B%2F%3D" in caplog.text


@pytest.mark.asyncio
async def test_start_auth_rejected_is_terminal(manager, mock_bridge):
    mock_bridge.status.side_effect = AuthenticationRejected("nope")
    await manager.start()
    assert manager.state == ConnectionState.AUTH_FAILED

    await manager.start()
    assert mock_bridge.status.await_count == 1


@pytest.mark.asyncio
async def test_start_bridge_down_schedules_reconnect(manager, mock_bridge):
    mock_bridge.status.side_effect = [BridgeError("down"), {"connected": True}]

    await manager.start()
    assert manager.state == ConnectionState.DISCONNECTED

    await settle(manager)
    mock_bridge.reconnect.assert_awaited_once()
    assert manager.state == ConnectionState.CONNECTED


@pytest.mark.asyncio
async def test_update_open(manager):
    manager.qr = "stale"
    manager.handle_update(connection="open")
    assert manager.is_ready()
    assert manager.qr is None


@pytest.mark.asyncio
async def test_update_close_reconnects(manager, mock_bridge):
    manager.state = ConnectionState.CONNECTED
    manager.handle_update(connection="close", status_code=428)

    assert manager.state == ConnectionState.DISCONNECTED
    assert manager.is_ready() is False

    await settle(manager)
    mock_bridge.reconnect.assert_awaited_once()
    assert manager.state == ConnectionState.CONNECTED


@pytest.mark.asyncio
async def test_update_close_401_does_not_reconnect(manager, mock_bridge):
    manager.state = ConnectionState.CONNECTED
    manager.handle_update(connection="close", status_code=401)

    assert manager.state == ConnectionState.AUTH_FAILED
    await settle(manager)
    mock_bridge.reconnect.assert_not_awaited()

    manager.handle_update(connection="connecting")
    assert manager.state == ConnectionState.AUTH_FAILED


@pytest.mark.asyncio
async def test_reconnect_rejected(manager, mock_bridge):
    mock_bridge.reconnect.side_effect = AuthenticationRejected("logged out")
    manager.handle_update(connection="close", status_code=500)

    await settle(manager)
    assert manager.state == ConnectionState.AUTH_FAILED


@pytest.mark.asyncio
async def test_reconnect_still_pending_after_open(manager, mock_bridge):
    manager.reconnect_delay = 0.05
    manager.handle_update(connection="close", status_code=500)
    manager.handle_update(connection="open")

    await asyncio.sleep(0.1)
    mock_bridge.reconnect.assert_not_awaited()
    assert manager.is_ready()


@pytest.mark.asyncio
async def test_stop_cancels_reconnect(manager, mock_bridge):
    manager.reconnect_delay = 10
    manager.handle_update(connection="close", status_code=500)
    assert manager._reconnect_task is not None

    await manager.stop()
    assert manager._reconnect_task is None
    mock_bridge.reconnect.assert_not_awaited()


@pytest.mark.asyncio
async def test_qr_update_logs_link(manager, caplog):
    with caplog.at_level(logging.INFO):
        manager.handle_update(qr="QRDATA")
    assert "https://api.qrserver.com/v1/create-qr-code/?size=200x200&data=QRDATA" in caplog.text
    assert manager.state == ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_send_and_delete_delegate(manager, mock_bridge):
    await manager.send_text("111@x", "hi")
    mock_bridge.send_text.assert_awaited_once_with("111@x", "hi")

    key = BridgeClient.build_self_key("111@x", "ABC")
    await manager.delete_message("111@x", key)
    mock_bridge.delete_message.assert_awaited_once_with("111@x", key)
