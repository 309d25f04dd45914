from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class AppendMessageRequest(BaseModel):
    text: str


class MessageResponse(BaseModel):
    id: UUID
    chat_id: UUID
    sender_id: int
    text: str
    sent_at: datetime

    model_config = {"from_attributes": True}
