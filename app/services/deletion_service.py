# app/services/deletion_service.py

import logging
from typing import Optional

from app.core.bridge_client import BridgeClient
from app.core.connection import ConnectionManager
from app.core.ledger import MessageLedger
from app.core.pacing import Pacer
from app.data_schemas import ChatSweepResult, DeletionOutcome, SweepSummary
from app.services.dispatch_service import ensure_connected, require_fields

logger = logging.getLogger(__name__)


class BulkDeletionService:
    """
    Deletes every tracked message of a chat, or of all chats.

    Deletions run one at a time with a pause after each attempt. A failed
    deletion is recorded and the sweep moves on. When at least one deletion
    in a chat succeeds, every message the sweep looked at is dropped from
    the ledger, failures included. The all-chats sweep drops every chat it
    processes whatever the outcome.
    """

    def __init__(
        self,
        connection: ConnectionManager,
        ledger: MessageLedger,
        pacer: Optional[Pacer] = None,
    ):
        self.connection = connection
        self.ledger = ledger
        self.pacer = pacer or Pacer()

    async def delete_all_in_chat(self, chat_id: Optional[str]) -> dict:
        require_fields(chatId=chat_id)
        ensure_connected(self.connection)
        result = await self._sweep(chat_id)
        return result.to_response()

    async def delete_all_everywhere(self) -> dict:
        ensure_connected(self.connection)

        summary = SweepSummary()
        chat_ids = self.ledger.all_chat_ids()
        if not chat_ids:
            summary.message = "No tracked messages to delete"
            return summary.to_response()

        # Chats run sequentially so pacing holds across the whole run
        for chat_id in chat_ids:
            summary.add(await self._sweep(chat_id, clear_always=True))

        logger.info(
            f"Swept {summary.total_chats} chats: {summary.total_deleted} deleted, "
            f"{summary.total_failed} failed"
        )
        return summary.to_response()

    async def _sweep(self, chat_id: str, clear_always: bool = False) -> ChatSweepResult:
        result = ChatSweepResult(chat_id=chat_id)

        async with self.ledger.sweep_lock(chat_id):
            messages = self.ledger.list(chat_id)
            if not messages:
                result.message = "No tracked messages to delete"
                return result

            for message in messages:
                key = BridgeClient.build_self_key(chat_id, message.id)
                try:
                    await self.connection.delete_message(chat_id, key)
                    result.add(DeletionOutcome(message_id=message.id, deleted=True))
                except Exception as e:
                    reason = getattr(e, "message", None) or str(e)
                    logger.warning(f"Failed to delete message {message.id}: {reason}")
                    result.add(
                        DeletionOutcome(message_id=message.id, deleted=False, error=reason)
                    )
                await self.pacer.wait()

            # The all-chats sweep forgets every chat it processes
            if clear_always or result.succeeded > 0:
                self.ledger.clear(chat_id, ids=[m.id for m in messages])

        logger.info(
            f"Swept {chat_id}: {result.succeeded}/{result.total} deleted, "
            f"{result.failed} failed"
        )
        return result
