from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from community_chat.api.deps import CurrentPrincipal, DeliveryDep, DirectoryDep, UoWDep
from community_chat.api.v1.schemas.chat import AppendMessageResponse, ChatResponse
from community_chat.api.v1.schemas.common import PaginatedResponse
from community_chat.api.v1.schemas.message import AppendMessageRequest, MessageResponse
from community_chat.services import conversation_service, message_service

router = APIRouter(prefix="/api/v1/chat", tags=["chats"])


@router.get("", response_model=PaginatedResponse[ChatResponse])
async def list_direct_chats(
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> PaginatedResponse[ChatResponse]:
    chats = await conversation_service.list_direct_chats(principal, cursor, limit, uow)
    return PaginatedResponse[ChatResponse].build(
        chats,
        limit=limit,
        to_item=lambda c: ChatResponse.model_validate(c, from_attributes=True),
        sort_key=lambda c: (c.last_message_at, c.id),
    )


@router.get("/with/{user_id}", response_model=ChatResponse)
async def get_direct_chat(
    user_id: int,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ChatResponse:
    chat = await conversation_service.resolve_direct(principal.subject_id, user_id, uow)
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.get("/public", response_model=ChatResponse)
async def get_public_chat(
    principal: CurrentPrincipal,
    uow: UoWDep,
    directory: DirectoryDep,
) -> ChatResponse:
    chat = await conversation_service.resolve_scoped_public(
        principal.subject_id, principal.tenant_scope, uow, directory,
    )
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ChatResponse:
    chat = await conversation_service.get_chat(chat_id, principal, uow)
    return ChatResponse.model_validate(chat, from_attributes=True)


@router.get("/{chat_id}/messages", response_model=PaginatedResponse[MessageResponse])
async def list_messages(
    chat_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> PaginatedResponse[MessageResponse]:
    messages = await message_service.list_messages(chat_id, principal, cursor, limit, uow)
    return PaginatedResponse[MessageResponse].build(
        messages,
        limit=limit,
        to_item=lambda m: MessageResponse.model_validate(m, from_attributes=True),
        sort_key=lambda m: (m.sent_at, m.id),
    )


@router.post("/{chat_id}/messages", response_model=AppendMessageResponse, status_code=201)
async def append_message(
    chat_id: UUID,
    body: AppendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    delivery: DeliveryDep,
) -> AppendMessageResponse:
    msg, chat = await message_service.append_message(chat_id, principal, body.text, uow)
    delivery.message_appended(chat, msg, principal.subject_id, principal.display_name)
    return AppendMessageResponse(
        message=MessageResponse.model_validate(msg, from_attributes=True),
        chat=ChatResponse.model_validate(chat, from_attributes=True),
    )
