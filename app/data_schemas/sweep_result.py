# app/data_schemas/sweep_result.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class DeletionOutcome(_CamelModel):
    """Result of one deletion attempt inside a sweep"""

    message_id: str
    deleted: bool
    error: Optional[str] = None


class ChatSweepResult(_CamelModel):
    """Aggregated outcome of sweeping a single chat"""

    chat_id: str
    deleted: bool = False
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    results: List[DeletionOutcome] = Field(default_factory=list)
    message: Optional[str] = None

    def add(self, outcome: DeletionOutcome) -> None:
        self.results.append(outcome)
        self.total += 1
        if outcome.deleted:
            self.succeeded += 1
        else:
            self.failed += 1
        self.deleted = self.succeeded > 0


class SweepSummary(_CamelModel):
    """Totals across every chat processed by an all-chats sweep"""

    deleted: bool = False
    total_chats: int = 0
    total_messages: int = 0
    total_deleted: int = 0
    total_failed: int = 0
    chats: List[ChatSweepResult] = Field(default_factory=list)
    message: Optional[str] = None

    def add(self, result: ChatSweepResult) -> None:
        self.chats.append(result)
        self.total_chats += 1
        self.total_messages += result.total
        self.total_deleted += result.succeeded
        self.total_failed += result.failed
        self.deleted = self.total_deleted > 0
