from __future__ import annotations

import pytest

from community_chat.domain.entities.member import Member
from community_chat.services import member_service
from community_chat.services.notification_dispatcher import NotificationDispatcher
from tests.conftest import FakeDirectory, FakePushProvider, FakeUoW


@pytest.mark.asyncio
async def test_register_and_clear_device_token(user_principal):
    directory = FakeDirectory({42: Member(id=42, display_name="Old", referral_id="R42")})

    member = await member_service.register_device_token(user_principal, " tok-42 ", directory)

    assert member.device_token == "tok-42"
    assert directory.members[42].device_token == "tok-42"
    assert directory.members[42].display_name == "Ravi"
    assert directory.members[42].referral_id == "R42"

    await member_service.register_device_token(user_principal, None, directory)
    assert directory.members[42].device_token is None


@pytest.mark.asyncio
async def test_status_change_labels():
    uow = FakeUoW()
    push = FakePushProvider()
    directory = FakeDirectory({7: Member(id=7, display_name="Ravi", device_token="tok-7")})
    dispatcher = NotificationDispatcher(push, directory, lambda: uow)

    outcome = await member_service.handle_status_changed(
        {"user_id": "7", "status": "approved"}, dispatcher,
    )

    assert outcome.pushed is True
    (record,) = uow.notifications._items
    assert record.title == "Account Approved"
    assert record.type == "status_change"
    assert member_service.status_message("rejected")[0] == "Account Rejected"
    assert member_service.status_message("pending")[0] == "Status Changed"
    assert member_service.status_message("suspended") == (
        "Status Update", "Your account status has been changed to suspended.",
    )


@pytest.mark.asyncio
async def test_registration_notifies_tenant_admins():
    uow = FakeUoW()
    directory = FakeDirectory({1: Member(id=1, display_name="Asha", referral_id="REF123")})
    dispatcher = NotificationDispatcher(FakePushProvider(), directory, lambda: uow)

    outcomes = await member_service.handle_member_registered(
        {"user_id": "50", "display_name": "Kiran", "sponsor_referral_id": "REF123", "admin_ids": "2"},
        directory,
        dispatcher,
    )

    assert sorted(o.recipient_id for o in outcomes) == [1, 2]
    assert directory.members[50].display_name == "Kiran"
    bodies = {n.body for n in uow.notifications._items}
    assert bodies == {"Kiran has registered and is waiting for approval."}
    assert {n.type for n in uow.notifications._items} == {"new_registration"}


@pytest.mark.asyncio
async def test_device_token_never_writes_tenant_scope_as_referral(user_principal):
    directory = FakeDirectory()

    member = await member_service.register_device_token(user_principal, "tok-42", directory)

    assert user_principal.tenant_scope == "REF123"
    assert member.referral_id is None
    assert directory.members[42].display_name == "Ravi"
