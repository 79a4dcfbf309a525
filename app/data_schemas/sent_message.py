# app/data_schemas/sent_message.py

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SentMessageRecord(BaseModel):
    """A message this bot sent during the current session"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str  # WhatsApp message ID
    text: str
    chat_id: str
    timestamp: int  # epoch milliseconds
