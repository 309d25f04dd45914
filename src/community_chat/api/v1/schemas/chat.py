from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from community_chat.api.v1.schemas.message import MessageResponse


class ChatResponse(BaseModel):
    id: UUID
    is_public: bool
    tenant_scope: str | None
    display_name: str
    participants: list[int]
    last_message_text: str | None
    last_message_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AppendMessageResponse(BaseModel):
    message: MessageResponse
    chat: ChatResponse
