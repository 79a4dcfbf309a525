from .sent_message import SentMessageRecord
from .sweep_result import DeletionOutcome, ChatSweepResult, SweepSummary

__all__ = ["SentMessageRecord", "DeletionOutcome", "ChatSweepResult", "SweepSummary"]
