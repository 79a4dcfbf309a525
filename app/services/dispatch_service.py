# app/services/dispatch_service.py

import logging
import time
from typing import Optional

from app.core.bridge_client import BridgeClient
from app.core.connection import ConnectionManager
from app.core.exceptions import (
    BridgeError,
    DeletionFailure,
    MissingFieldError,
    NotConnectedError,
    SendFailure,
)
from app.core.ledger import MessageLedger

logger = logging.getLogger(__name__)


def require_fields(**fields: Optional[str]) -> None:
    """Raise MissingFieldError naming every empty field"""
    missing = [name for name, value in fields.items() if not value or not str(value).strip()]
    if missing:
        raise MissingFieldError(*missing)


def _to_timestamp(value) -> int:
    """Bridge timestamp as int, capture time in epoch ms when unusable"""
    if value:
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric bridge timestamp {value!r}")
    return int(time.time() * 1000)


def ensure_connected(connection: ConnectionManager) -> None:
    if not connection.is_ready():
        raise NotConnectedError(
            f"WhatsApp is not connected (state: {connection.state.value})"
        )


class DispatchService:
    def __init__(self, connection: ConnectionManager, ledger: MessageLedger):
        self.connection = connection
        self.ledger = ledger

    async def send(self, to: Optional[str], text: Optional[str]) -> dict:
        """Send a text message and track it for later deletion"""
        require_fields(to=to, text=text)
        ensure_connected(self.connection)

        try:
            result = await self.connection.send_text(to, text)
        except BridgeError as e:
            logger.error(f"Failed to send message to {to}: {e.message}")
            raise SendFailure(e.message)

        message_id = result["id"]
        timestamp = _to_timestamp(result.get("timestamp"))
        self.ledger.record(to, message_id, text, timestamp)
        logger.info(f"[SENT] {to}: {message_id}")

        return {
            "sent": True,
            "messageId": message_id,
            "chatId": to,
            "timestamp": timestamp,
        }

    async def delete_message(
        self, chat_id: Optional[str], message_id: Optional[str]
    ) -> dict:
        """Revoke one of our messages; the ledger only changes on success"""
        require_fields(chatId=chat_id, messageId=message_id)
        ensure_connected(self.connection)

        key = BridgeClient.build_self_key(chat_id, message_id)
        try:
            await self.connection.delete_message(chat_id, key)
        except BridgeError as e:
            logger.warning(f"Failed to delete message {message_id}: {e.message}")
            raise DeletionFailure(e.message)

        if not self.ledger.remove_by_id(chat_id, message_id):
            logger.info(f"Deleted message {message_id} was not tracked for {chat_id}")
        logger.info(f"[DELETED] {chat_id}: {message_id}")

        return {"deleted": True, "messageId": message_id, "chatId": chat_id}

    def list_sent(self, chat_id: Optional[str]) -> dict:
        require_fields(chatId=chat_id)
        messages = self.ledger.list(chat_id)
        return {
            "chatId": chat_id,
            "sentMessages": [m.model_dump(by_alias=True) for m in messages],
            "count": len(messages),
        }
