# app/core/ledger.py

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Iterable, List, Optional, Union

from app.data_schemas import SentMessageRecord


class MessageLedger:
    """
    In-memory record of messages sent by the bot, keyed by chat.

    Sequences keep send order (oldest first). A chat with no tracked
    messages has no key at all. Nothing here survives a restart.
    """

    def __init__(self):
        self._chats: Dict[str, List[SentMessageRecord]] = {}
        # chat_id -> [lock, number of sweeps holding or waiting on it]
        self._locks: Dict[str, List[Union[asyncio.Lock, int]]] = {}

    def record(
        self, chat_id: str, message_id: str, text: str, timestamp: int
    ) -> SentMessageRecord:
        """Track a successfully sent message"""
        entry = SentMessageRecord(
            id=message_id, text=text, chat_id=chat_id, timestamp=timestamp
        )
        # An id lives in one chat only, and once within it
        for other_chat in [c for c in self._chats if c != chat_id]:
            self.remove_by_id(other_chat, message_id)

        messages = self._chats.setdefault(chat_id, [])
        for index, existing in enumerate(messages):
            if existing.id == message_id:
                messages[index] = entry
                break
        else:
            messages.append(entry)
        return entry

    def list(self, chat_id: str) -> List[SentMessageRecord]:
        return list(self._chats.get(chat_id, []))

    def remove_by_id(self, chat_id: str, message_id: str) -> bool:
        """Drop one message, returns False if it was not tracked"""
        messages = self._chats.get(chat_id)
        if not messages:
            return False
        remaining = [m for m in messages if m.id != message_id]
        removed = len(remaining) != len(messages)
        self._store(chat_id, remaining)
        return removed

    def clear(self, chat_id: str, ids: Optional[Iterable[str]] = None) -> int:
        """
        Forget a chat's messages.

        With `ids`, only those messages are dropped so anything recorded
        after the caller took its snapshot stays tracked.
        Returns the number of records removed.
        """
        messages = self._chats.get(chat_id, [])
        if ids is None:
            self._chats.pop(chat_id, None)
            return len(messages)

        targets = set(ids)
        remaining = [m for m in messages if m.id not in targets]
        self._store(chat_id, remaining)
        return len(messages) - len(remaining)

    def all_chat_ids(self) -> List[str]:
        return list(self._chats)

    def snapshot(self) -> Dict[str, List[SentMessageRecord]]:
        return {chat_id: list(messages) for chat_id, messages in self._chats.items()}

    @asynccontextmanager
    async def sweep_lock(self, chat_id: str):
        """Serialize deletion sweeps of one chat; the lock is dropped when unused"""
        entry = self._locks.get(chat_id)
        if entry is None:
            entry = self._locks[chat_id] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0 and self._locks.get(chat_id) is entry:
                del self._locks[chat_id]

    def has_lock(self, chat_id: str) -> bool:
        return chat_id in self._locks

    def _store(self, chat_id: str, messages: List[SentMessageRecord]) -> None:
        if messages:
            self._chats[chat_id] = messages
        else:
            self._chats.pop(chat_id, None)

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._chats.values())
