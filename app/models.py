# app/models.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional

# Fields are optional so missing values reach the services and get a 400
# instead of FastAPI's 422


class _RequestBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SendRequest(_RequestBody):
    to: Optional[str] = None
    text: Optional[str] = None


class DeleteMessageRequest(_RequestBody):
    chat_id: Optional[str] = None
    message_id: Optional[str] = None


class DeleteAllSentRequest(_RequestBody):
    chat_id: Optional[str] = None


class BridgeEvent(BaseModel):
    """Callback payload pushed by the WhatsApp bridge"""

    event: str
    data: Dict[str, Any] = Field(default_factory=dict)
