from __future__ import annotations

import asyncio

import pytest

from community_chat.application.exceptions import ForbiddenError, NotFoundError, ValidationError
from community_chat.domain.entities.member import Member
from community_chat.services import conversation_service
from tests.conftest import FakeDirectory, FakeUoW, make_chat


@pytest.mark.asyncio
async def test_resolve_direct_creates_chat():
    uow = FakeUoW()

    chat = await conversation_service.resolve_direct(42, 43, uow)

    assert chat.is_public is False
    assert set(chat.participants) == {42, 43}
    assert chat.last_message_text is None
    assert uow._committed is True


@pytest.mark.asyncio
async def test_resolve_direct_is_order_independent():
    uow = FakeUoW()

    first = await conversation_service.resolve_direct(42, 43, uow)
    uow.commits = 0
    second = await conversation_service.resolve_direct(43, 42, uow)

    assert first.id == second.id
    assert len(uow.chats._store) == 1
    assert uow._committed is False


@pytest.mark.asyncio
async def test_concurrent_first_contact_yields_one_chat():
    uow = FakeUoW()

    a, b = await asyncio.gather(
        conversation_service.resolve_direct(42, 43, uow),
        conversation_service.resolve_direct(43, 42, uow),
    )

    assert a.id == b.id
    assert len(uow.chats._store) == 1


@pytest.mark.asyncio
async def test_resolve_direct_with_self_rejected():
    with pytest.raises(ValidationError):
        await conversation_service.resolve_direct(42, 42, FakeUoW())


@pytest.mark.asyncio
async def test_scoped_public_uses_owner_name():
    uow = FakeUoW()
    directory = FakeDirectory({1: Member(id=1, display_name="Asha", referral_id="REF123")})

    chat = await conversation_service.resolve_scoped_public(3, "REF123", uow, directory)

    assert chat.is_public is True
    assert chat.tenant_scope == "REF123"
    assert chat.display_name == "Asha"
    assert chat.participants == (3,)


@pytest.mark.asyncio
async def test_scoped_public_falls_back_when_owner_unknown():
    uow = FakeUoW()

    chat = await conversation_service.resolve_scoped_public(3, "REF123", uow, FakeDirectory())

    assert chat.display_name == "My Connect"


@pytest.mark.asyncio
async def test_scoped_public_falls_back_when_lookup_fails():
    uow = FakeUoW()

    chat = await conversation_service.resolve_scoped_public(
        3, "REF123", uow, FakeDirectory(fail=True),
    )

    assert chat.display_name == "My Connect"
    assert uow._committed is True


@pytest.mark.asyncio
async def test_default_scope_is_its_own_chat():
    uow = FakeUoW()
    directory = FakeDirectory()

    default = await conversation_service.resolve_scoped_public(3, None, uow, directory)
    scoped = await conversation_service.resolve_scoped_public(3, "REF123", uow, directory)
    again = await conversation_service.resolve_scoped_public(4, None, uow, directory)

    assert default.tenant_scope is None
    assert default.id != scoped.id
    assert again.id == default.id
    assert again.participants == (3, 4)


@pytest.mark.asyncio
async def test_ensure_membership_never_duplicates():
    uow = FakeUoW()
    directory = FakeDirectory()

    await conversation_service.resolve_scoped_public(3, "REF123", uow, directory)
    await asyncio.gather(
        conversation_service.resolve_scoped_public(5, "REF123", uow, directory),
        conversation_service.resolve_scoped_public(5, "REF123", uow, directory),
    )
    chat = await conversation_service.resolve_scoped_public(3, "REF123", uow, directory)

    assert chat.participants == (3, 5)


@pytest.mark.asyncio
async def test_ensure_membership_reports_added_without_committing():
    uow = FakeUoW()
    chat = uow.chats.seed(make_chat(is_public=True, participants=(3,), tenant_scope="REF123"))

    joined, added = await conversation_service.ensure_membership(chat, 5, uow)
    again, added_again = await conversation_service.ensure_membership(joined, 5, uow)

    assert (added, added_again) == (True, False)
    assert joined.participants == (3, 5)
    assert again is joined
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_list_direct_chats_only_mine(user_principal):
    uow = FakeUoW()
    mine = uow.chats.seed(make_chat(participants=(42, 43)))
    uow.chats.seed(make_chat(participants=(7, 8)))
    uow.chats.seed(make_chat(is_public=True, participants=(42,), tenant_scope="REF123"))

    result = await conversation_service.list_direct_chats(user_principal, None, 20, uow)

    assert [c.id for c in result] == [mine.id]


@pytest.mark.asyncio
async def test_get_chat_rules(user_principal, admin_principal):
    uow = FakeUoW()
    foreign = uow.chats.seed(make_chat(participants=(7, 8)))
    same_scope = uow.chats.seed(
        make_chat(is_public=True, participants=(7,), tenant_scope="REF123"),
    )
    other_scope = uow.chats.seed(
        make_chat(is_public=True, participants=(7,), tenant_scope="OTHER"),
    )

    with pytest.raises(ForbiddenError):
        await conversation_service.get_chat(foreign.id, user_principal, uow)
    with pytest.raises(ForbiddenError):
        await conversation_service.get_chat(other_scope.id, user_principal, uow)
    assert (await conversation_service.get_chat(same_scope.id, user_principal, uow)).id == same_scope.id
    assert (await conversation_service.get_chat(foreign.id, admin_principal, uow)).id == foreign.id


@pytest.mark.asyncio
async def test_get_chat_missing(user_principal):
    import uuid

    with pytest.raises(NotFoundError):
        await conversation_service.get_chat(uuid.uuid4(), user_principal, FakeUoW())
