from __future__ import annotations

import uuid

import pytest

from community_chat.application.dto.chat import ChatFilterDTO
from community_chat.application.exceptions import ForbiddenError, NotFoundError, ValidationError
from community_chat.services import admin_service, message_service
from tests.conftest import FakeUoW, make_chat


@pytest.mark.asyncio
async def test_list_chats_filters(admin_principal):
    uow = FakeUoW()
    direct = uow.chats.seed(make_chat(participants=(42, 43)))
    public = uow.chats.seed(make_chat(is_public=True, participants=(7,), tenant_scope="REF123"))

    assert [c.id for c in await admin_service.list_chats(ChatFilterDTO(is_public=True), admin_principal, uow)] == [public.id]
    assert [c.id for c in await admin_service.list_chats(ChatFilterDTO(member_id=43), admin_principal, uow)] == [direct.id]


@pytest.mark.asyncio
async def test_list_chats_requires_admin(user_principal):
    with pytest.raises(ForbiddenError):
        await admin_service.list_chats(ChatFilterDTO(), user_principal, FakeUoW())


@pytest.mark.asyncio
async def test_delete_messages_recomputes_summary(admin_principal, user_principal, other_principal):
    uow = FakeUoW()
    chat = uow.chats.seed(make_chat(participants=(42, 43)))
    first, _ = await message_service.append_message(chat.id, user_principal, "first", uow)
    last, _ = await message_service.append_message(chat.id, other_principal, "last", uow)

    deleted, updated = await admin_service.delete_messages(chat.id, [last.id], admin_principal, uow)

    assert deleted == 1
    assert updated.last_message_text == "first"
    assert updated.last_message_at == first.sent_at


@pytest.mark.asyncio
async def test_delete_messages_validation(admin_principal):
    uow = FakeUoW()

    with pytest.raises(ValidationError):
        await admin_service.delete_messages(uuid.uuid4(), [], admin_principal, uow)
    with pytest.raises(NotFoundError):
        await admin_service.delete_messages(uuid.uuid4(), [uuid.uuid4()], admin_principal, uow)


@pytest.mark.asyncio
async def test_delete_chats(admin_principal):
    uow = FakeUoW()
    a = uow.chats.seed(make_chat(participants=(1, 2)))
    b = uow.chats.seed(make_chat(participants=(3, 4)))

    deleted = await admin_service.delete_chats([a.id, b.id, uuid.uuid4()], admin_principal, uow)

    assert deleted == 2
    assert uow.chats._store == {}
    assert uow._committed is True


@pytest.mark.asyncio
async def test_get_chat_messages_without_membership(admin_principal, user_principal):
    uow = FakeUoW()
    chat = uow.chats.seed(make_chat(participants=(42, 43)))
    await message_service.append_message(chat.id, user_principal, "private", uow)

    messages = await admin_service.get_chat_messages(chat.id, admin_principal, None, 50, uow)

    assert [m.text for m in messages] == ["private"]
