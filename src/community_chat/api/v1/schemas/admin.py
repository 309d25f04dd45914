from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from community_chat.api.v1.schemas.chat import ChatResponse


class DeleteMessagesRequest(BaseModel):
    message_ids: list[UUID] = Field(min_length=1)


class DeleteMessagesResponse(BaseModel):
    deleted: int
    chat: ChatResponse


class DeleteChatsRequest(BaseModel):
    chat_ids: list[UUID] = Field(min_length=1)


class DeleteChatsResponse(BaseModel):
    deleted: int
