from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from community_chat.api.deps import CurrentAdmin, DeliveryDep, UoWDep
from community_chat.api.v1.schemas.admin import (
    DeleteChatsRequest,
    DeleteChatsResponse,
    DeleteMessagesRequest,
    DeleteMessagesResponse,
)
from community_chat.api.v1.schemas.chat import ChatResponse
from community_chat.api.v1.schemas.message import MessageResponse
from community_chat.application.dto.chat import ChatFilterDTO
from community_chat.services import admin_service

router = APIRouter(prefix="/api/v1/chat/admin/chats", tags=["admin"])


@router.get("", response_model=list[ChatResponse])
async def list_chats(
    admin: CurrentAdmin,
    uow: UoWDep,
    is_public: bool | None = Query(None),
    member_id: int | None = Query(None),
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> list[ChatResponse]:
    filters = ChatFilterDTO(
        is_public=is_public,
        member_id=member_id,
        cursor=cursor,
        limit=limit,
    )
    chats = await admin_service.list_chats(filters, admin, uow)
    return [ChatResponse.model_validate(c, from_attributes=True) for c in chats]


@router.get("/{chat_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    chat_id: UUID,
    admin: CurrentAdmin,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> list[MessageResponse]:
    messages = await admin_service.get_chat_messages(chat_id, admin, cursor, limit, uow)
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.delete("/{chat_id}/messages", response_model=DeleteMessagesResponse)
async def delete_messages(
    chat_id: UUID,
    body: DeleteMessagesRequest,
    admin: CurrentAdmin,
    uow: UoWDep,
    delivery: DeliveryDep,
) -> DeleteMessagesResponse:
    deleted, chat = await admin_service.delete_messages(chat_id, body.message_ids, admin, uow)
    delivery.summary_changed(chat)
    return DeleteMessagesResponse(
        deleted=deleted,
        chat=ChatResponse.model_validate(chat, from_attributes=True),
    )


@router.delete("", response_model=DeleteChatsResponse)
async def delete_chats(
    body: DeleteChatsRequest,
    admin: CurrentAdmin,
    uow: UoWDep,
) -> DeleteChatsResponse:
    deleted = await admin_service.delete_chats(body.chat_ids, admin, uow)
    return DeleteChatsResponse(deleted=deleted)
