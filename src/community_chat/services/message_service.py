"""Message append engine: append-only log plus denormalized chat summary."""
from __future__ import annotations

import logging
import uuid

from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import NotFoundError, ValidationError
from community_chat.application.policies.permissions import assert_chat_access
from community_chat.application.ports.clock import Clock, SystemClock, now_after
from community_chat.application.uow import UnitOfWork
from community_chat.config import settings
from community_chat.domain.entities.chat import Chat
from community_chat.domain.entities.message import Message
from community_chat.services.conversation_service import ensure_membership

logger = logging.getLogger(__name__)

_clock: Clock = SystemClock()


def _validate_text(text: object) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Message text is required")
    if len(text) > settings.MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Message text exceeds {settings.MESSAGE_MAX_LENGTH} characters"
        )
    return text


async def append_message(
    chat_id: uuid.UUID,
    principal: Principal,
    text: str | None,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> tuple[Message, Chat]:
    """Append a message and refresh the chat summary in one transaction.

    The chat row stays locked from read to commit, which serializes appends
    to the same chat and keeps ``sent_at`` in append order.
    """
    text = _validate_text(text)

    chat = await uow.chats.get_for_update(chat_id)
    chat = assert_chat_access(principal, chat, write=True)
    if chat.is_public:
        chat, _added = await ensure_membership(chat, principal.subject_id, uow)

    msg = Message(
        id=uuid.uuid4(),
        chat_id=chat.id,
        sender_id=principal.subject_id,
        text=text,
        sent_at=now_after(clock, chat.last_message_at),
    )
    msg = await uow.messages_w.add(msg)
    await uow.chats_w.set_summary(chat.id, msg.text, msg.sent_at)
    await uow.commit()

    updated = await uow.chats.get_by_id(chat.id)
    assert updated is not None
    logger.debug("Appended message %s to chat %s", msg.id, chat.id)
    return msg, updated


async def recompute_summary(
    chat_id: uuid.UUID,
    uow: UnitOfWork,
    *,
    commit: bool = True,
) -> Chat:
    """Rebuild ``last_message_text``/``last_message_at`` from the log tail.

    Both are cleared when the log is empty. Used after messages were removed
    out of band.
    """
    chat = await uow.chats.get_for_update(chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")

    tail = await uow.messages.get_tail(chat_id)
    if tail is None:
        await uow.chats_w.set_summary(chat_id, None, None)
    else:
        await uow.chats_w.set_summary(chat_id, tail.text, tail.sent_at)
    if commit:
        await uow.commit()

    updated = await uow.chats.get_by_id(chat_id)
    assert updated is not None
    return updated


async def list_messages(
    chat_id: uuid.UUID,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    chat = await uow.chats.get_by_id(chat_id)
    chat = assert_chat_access(principal, chat)
    if chat.is_public:
        _chat, added = await ensure_membership(chat, principal.subject_id, uow)
        if added:
            await uow.commit()
    return await uow.messages.list_messages(chat_id, cursor=cursor, limit=limit)
