from __future__ import annotations

import logging
import uuid

from community_chat.application.dto.chat import ChatFilterDTO
from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import NotFoundError, ValidationError
from community_chat.application.policies.permissions import assert_admin
from community_chat.application.uow import UnitOfWork
from community_chat.domain.entities.chat import Chat
from community_chat.domain.entities.message import Message
from community_chat.services.message_service import recompute_summary

logger = logging.getLogger(__name__)


async def list_chats(
    filters: ChatFilterDTO,
    principal: Principal,
    uow: UnitOfWork,
) -> list[Chat]:
    assert_admin(principal)
    return await uow.chats.list_for_admin(filters)


async def get_chat_messages(
    chat_id: uuid.UUID,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    assert_admin(principal)
    chat = await uow.chats.get_by_id(chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    return await uow.messages.list_messages(chat_id, cursor=cursor, limit=limit)


async def delete_messages(
    chat_id: uuid.UUID,
    message_ids: list[uuid.UUID],
    principal: Principal,
    uow: UnitOfWork,
) -> tuple[int, Chat]:
    """Remove messages from a chat and rebuild its summary in the same transaction."""
    assert_admin(principal)
    if not message_ids:
        raise ValidationError("message_ids must not be empty")

    chat = await uow.chats.get_for_update(chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")

    deleted = await uow.messages_w.delete_many(chat_id, message_ids)
    chat = await recompute_summary(chat_id, uow, commit=False)
    await uow.commit()
    logger.info(
        "Admin %d deleted %d messages from chat %s", principal.subject_id, deleted, chat_id,
    )
    return deleted, chat


async def delete_chats(
    chat_ids: list[uuid.UUID],
    principal: Principal,
    uow: UnitOfWork,
) -> int:
    assert_admin(principal)
    if not chat_ids:
        raise ValidationError("chat_ids must not be empty")
    deleted = await uow.chats_w.delete_many(chat_ids)
    await uow.commit()
    logger.info("Admin %d deleted %d chats", principal.subject_id, deleted)
    return deleted
