# app/core/connection.py

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import quote

from app.core.bridge_client import BridgeClient
from app.core.exceptions import AuthenticationRejected, BridgeError

logger = logging.getLogger(__name__)

QR_LINK_TEMPLATE = "https://api.qrserver.com/v1/create-qr-code/?size=200x200&data={data}"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    AUTH_FAILED = "auth_failed"


class ConnectionManager:
    """
    Tracks the WhatsApp session held by the bridge.

    The bridge pushes `connection.update` events which move the state machine:
    - open -> CONNECTED
    - close with 401 -> AUTH_FAILED, terminal until the process restarts
    - any other close -> DISCONNECTED, then CONNECTING after a reconnect request
    """

    def __init__(self, bridge: BridgeClient, reconnect_delay: float = 1.0):
        self.bridge = bridge
        self.reconnect_delay = reconnect_delay
        self.state = ConnectionState.DISCONNECTED
        self.qr: Optional[str] = None
        self._reconnect_task: Optional[asyncio.Task] = None

    def is_ready(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def _set_state(self, state: ConnectionState) -> None:
        if state != self.state:
            logger.info(f"Connection state: {self.state.value} -> {state.value}")
        self.state = state

    def _show_qr(self, qr: str) -> None:
        self.qr = qr
        logger.info("QR code received, scan it with WhatsApp to link this bot")
        logger.info(f"Visual QR code: {QR_LINK_TEMPLATE.format(data=quote(qr, safe=''))}")

    async def start(self) -> None:
        """Ask the bridge for the current session state"""
        if self.state == ConnectionState.AUTH_FAILED:
            return
        self._set_state(ConnectionState.CONNECTING)
        await self._refresh()

    async def _refresh(self) -> None:
        try:
            status = await self.bridge.status()
        except AuthenticationRejected as e:
            logger.error(f"Bridge rejected authentication: {e.message}")
            self._set_state(ConnectionState.AUTH_FAILED)
            return
        except BridgeError as e:
            logger.warning(f"Could not read bridge status: {e.message}")
            self._set_state(ConnectionState.DISCONNECTED)
            self._schedule_reconnect()
            return

        if status.get("qr"):
            self._show_qr(status["qr"])
        if status.get("connected"):
            self.qr = None
            self._set_state(ConnectionState.CONNECTED)
            logger.info("WhatsApp connected successfully")

    def handle_update(
        self,
        connection: Optional[str] = None,
        status_code: Optional[int] = None,
        qr: Optional[str] = None,
    ) -> None:
        """Apply a connection.update event coming from the bridge"""
        if qr:
            self._show_qr(qr)

        if connection == "open":
            self.qr = None
            self._set_state(ConnectionState.CONNECTED)
            logger.info("WhatsApp connected successfully")
        elif connection == "connecting":
            if self.state != ConnectionState.AUTH_FAILED:
                self._set_state(ConnectionState.CONNECTING)
        elif connection == "close":
            should_reconnect = status_code != 401
            logger.warning(
                f"Connection closed (status {status_code}), reconnecting: {should_reconnect}"
            )
            if should_reconnect:
                self._set_state(ConnectionState.DISCONNECTED)
                self._schedule_reconnect()
            else:
                self._set_state(ConnectionState.AUTH_FAILED)

    def _schedule_reconnect(self) -> None:
        if self.state == ConnectionState.AUTH_FAILED:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._reconnect_task = asyncio.create_task(self._reconnect_after_delay())

    async def _reconnect_after_delay(self) -> None:
        await asyncio.sleep(self.reconnect_delay)
        self._reconnect_task = None
        if self.state in (ConnectionState.CONNECTED, ConnectionState.AUTH_FAILED):
            return

        self._set_state(ConnectionState.CONNECTING)
        try:
            await self.bridge.reconnect()
        except AuthenticationRejected as e:
            logger.error(f"Bridge rejected authentication: {e.message}")
            self._set_state(ConnectionState.AUTH_FAILED)
            return
        except BridgeError as e:
            logger.warning(f"Reconnect request failed: {e.message}")
            self._set_state(ConnectionState.DISCONNECTED)
            self._schedule_reconnect()
            return

        await self._refresh()

    async def stop(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def send_text(self, to: str, text: str) -> Dict[str, Any]:
        return await self.bridge.send_text(to, text)

    async def delete_message(self, chat_id: str, key: Dict[str, Any]) -> Dict[str, Any]:
        return await self.bridge.delete_message(chat_id, key)
