"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from community_chat.application.dto.chat import ChatFilterDTO
from community_chat.application.dto.principal import Principal
from community_chat.application.dto.push import MulticastResult
from community_chat.domain.entities.chat import Chat, direct_key, scope_key
from community_chat.domain.entities.member import Member
from community_chat.domain.entities.message import Message
from community_chat.domain.entities.notification import Notification
from community_chat.domain.value_objects.enums import ParticipantKind


@pytest.fixture
def user_principal() -> Principal:
    return Principal(
        kind=ParticipantKind.USER, subject_id=42, roles=[],
        display_name="Ravi", tenant_scope="REF123",
    )


@pytest.fixture
def other_principal() -> Principal:
    return Principal(
        kind=ParticipantKind.USER, subject_id=43, roles=[],
        display_name="Meera", tenant_scope="REF123",
    )


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(kind=ParticipantKind.ADMIN, subject_id=1, roles=["admin"])


def make_chat(
    *,
    chat_id: UUID | None = None,
    is_public: bool = False,
    participants: tuple[int, ...] = (42, 43),
    tenant_scope: str | None = None,
    display_name: str = "Direct chat",
) -> Chat:
    now = datetime.now(timezone.utc)
    return Chat(
        id=chat_id or uuid.uuid4(),
        is_public=is_public,
        tenant_scope=tenant_scope,
        display_name=display_name,
        participants=participants,
        last_message_text=None,
        last_message_at=None,
        created_at=now,
        updated_at=now,
    )


def make_message(
    *,
    chat_id: UUID | None = None,
    sender_id: int = 42,
    text: str = "hello",
    sent_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        chat_id=chat_id or uuid.uuid4(),
        sender_id=sender_id,
        text=text,
        sent_at=sent_at or datetime.now(timezone.utc),
    )


class FixedClock:
    """Clock that never advances, to exercise timestamp tie-breaking."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now


@dataclass
class FakeChatReader:
    _store: dict[UUID, Chat] = field(default_factory=dict)
    _direct: dict[str, UUID] = field(default_factory=dict)
    _public: dict[str, UUID] = field(default_factory=dict)

    def seed(self, chat: Chat) -> Chat:
        self._store[chat.id] = chat
        if chat.is_public:
            self._public[scope_key(chat.tenant_scope)] = chat.id
        else:
            self._direct[direct_key(*chat.participants)] = chat.id
        return chat

    async def get_by_id(self, chat_id: UUID) -> Chat | None:
        return self._store.get(chat_id)

    async def get_for_update(self, chat_id: UUID) -> Chat | None:
        return self._store.get(chat_id)

    async def get_direct(self, direct_key: str) -> Chat | None:
        # Yield so concurrent resolvers interleave between read and insert.
        await asyncio.sleep(0)
        chat_id = self._direct.get(direct_key)
        return self._store.get(chat_id) if chat_id else None

    async def get_public(self, scope_key: str) -> Chat | None:
        await asyncio.sleep(0)
        chat_id = self._public.get(scope_key)
        return self._store.get(chat_id) if chat_id else None

    async def list_direct_for_member(
        self, member_id: int, *, cursor: str | None = None, limit: int = 20
    ) -> list[Chat]:
        chats = [
            c for c in self._store.values()
            if not c.is_public and c.has_participant(member_id)
        ]
        chats.sort(key=lambda c: c.last_message_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return chats[:limit]

    async def list_for_admin(self, filters: ChatFilterDTO) -> list[Chat]:
        chats = list(self._store.values())
        if filters.is_public is not None:
            chats = [c for c in chats if c.is_public == filters.is_public]
        if filters.member_id is not None:
            chats = [c for c in chats if c.has_participant(filters.member_id)]
        return chats[:filters.limit]


@dataclass
class FakeChatWriter:
    _reader: FakeChatReader

    async def create_direct_if_absent(self, chat: Chat, direct_key: str) -> bool:
        if direct_key in self._reader._direct:
            return False
        self._reader._store[chat.id] = chat
        self._reader._direct[direct_key] = chat.id
        return True

    async def create_public_if_absent(self, chat: Chat, scope_key: str) -> bool:
        if scope_key in self._reader._public:
            return False
        self._reader._store[chat.id] = chat
        self._reader._public[scope_key] = chat.id
        return True

    async def set_summary(self, chat_id: UUID, text: str | None, ts: datetime | None) -> None:
        chat = self._reader._store[chat_id]
        self._reader._store[chat_id] = dataclasses.replace(
            chat, last_message_text=text, last_message_at=ts,
        )

    async def delete_many(self, chat_ids: list[UUID]) -> int:
        deleted = 0
        for chat_id in chat_ids:
            if self._reader._store.pop(chat_id, None) is not None:
                deleted += 1
        return deleted


@dataclass
class FakeParticipantWriter:
    _chats: FakeChatReader

    async def add_if_absent(self, chat_id: UUID, subject_id: int) -> bool:
        chat = self._chats._store[chat_id]
        if chat.has_participant(subject_id):
            return False
        self._chats._store[chat_id] = dataclasses.replace(
            chat, participants=(*chat.participants, subject_id),
        )
        return True


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    def for_chat(self, chat_id: UUID) -> list[Message]:
        return sorted(
            (m for m in self._messages if m.chat_id == chat_id),
            key=lambda m: m.sent_at,
        )

    async def list_messages(
        self, chat_id: UUID, *, cursor: str | None = None, limit: int = 50
    ) -> list[Message]:
        return self.for_chat(chat_id)[:limit]

    async def get_tail(self, chat_id: UUID) -> Message | None:
        messages = self.for_chat(chat_id)
        return messages[-1] if messages else None


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def add(self, message: Message) -> Message:
        self._reader._messages.append(message)
        return message

    async def delete_many(self, chat_id: UUID, message_ids: list[UUID]) -> int:
        ids = set(message_ids)
        before = len(self._reader._messages)
        self._reader._messages = [
            m for m in self._reader._messages
            if not (m.chat_id == chat_id and m.id in ids)
        ]
        return before - len(self._reader._messages)


@dataclass
class FakeNotificationReader:
    _items: list[Notification] = field(default_factory=list)

    def for_recipient(self, recipient_id: int) -> list[Notification]:
        return [n for n in self._items if n.recipient_id == recipient_id]

    async def list_for_recipient(self, recipient_id: int, *, limit: int = 50) -> list[Notification]:
        return list(reversed(self.for_recipient(recipient_id)))[:limit]

    async def count_unread(self, recipient_id: int) -> int:
        return sum(1 for n in self.for_recipient(recipient_id) if not n.is_read)


@dataclass
class FakeNotificationWriter:
    _reader: FakeNotificationReader

    async def add_many(self, notifications: list[Notification]) -> None:
        now = datetime.now(timezone.utc)
        for i, n in enumerate(notifications):
            self._reader._items.append(
                dataclasses.replace(n, created_at=n.created_at or now + timedelta(microseconds=i))
            )

    async def mark_read(self, notification_id: UUID, recipient_id: int) -> Notification | None:
        for i, n in enumerate(self._reader._items):
            if n.id == notification_id and n.recipient_id == recipient_id:
                updated = dataclasses.replace(n, is_read=True)
                self._reader._items[i] = updated
                return updated
        return None

    async def mark_all_read(self, recipient_id: int) -> int:
        count = 0
        for i, n in enumerate(self._reader._items):
            if n.recipient_id == recipient_id and not n.is_read:
                self._reader._items[i] = dataclasses.replace(n, is_read=True)
                count += 1
        return count

    async def delete(self, notification_id: UUID, recipient_id: int) -> bool:
        for n in self._reader._items:
            if n.id == notification_id and n.recipient_id == recipient_id:
                self._reader._items.remove(n)
                return True
        return False

    async def delete_all(self, recipient_id: int) -> int:
        before = len(self._reader._items)
        self._reader._items = [n for n in self._reader._items if n.recipient_id != recipient_id]
        return before - len(self._reader._items)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests. Also usable as its own async context manager."""
    chats: FakeChatReader = field(default_factory=FakeChatReader)
    chats_w: FakeChatWriter | None = None
    participants_w: FakeParticipantWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    notifications: FakeNotificationReader = field(default_factory=FakeNotificationReader)
    notifications_w: FakeNotificationWriter | None = None
    commits: int = 0

    def __post_init__(self) -> None:
        if self.chats_w is None:
            self.chats_w = FakeChatWriter(self.chats)
        if self.participants_w is None:
            self.participants_w = FakeParticipantWriter(self.chats)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)
        if self.notifications_w is None:
            self.notifications_w = FakeNotificationWriter(self.notifications)

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeDirectory:
    members: dict[int, Member] = field(default_factory=dict)
    fail: bool = False

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("directory unavailable")

    async def get(self, member_id: int) -> Member | None:
        self._check()
        return self.members.get(member_id)

    async def get_many(self, member_ids: list[int]) -> dict[int, Member]:
        self._check()
        return {i: self.members[i] for i in member_ids if i in self.members}

    async def get_by_referral(self, referral_id: str) -> Member | None:
        self._check()
        for m in self.members.values():
            if m.referral_id == referral_id:
                return m
        return None

    async def upsert(self, member: Member) -> Member:
        self._check()
        existing = self.members.get(member.id)
        if existing is not None:
            member = dataclasses.replace(
                member,
                referral_id=member.referral_id or existing.referral_id,
                device_token=existing.device_token,
            )
        self.members[member.id] = member
        return member

    async def set_device_token(self, member_id: int, token: str | None) -> None:
        self._check()
        if member_id in self.members:
            self.members[member_id] = dataclasses.replace(self.members[member_id], device_token=token)


@dataclass
class FakePushProvider:
    failing_tokens: set[str] = field(default_factory=set)
    sent_one: list[tuple[str, str, str, dict[str, str]]] = field(default_factory=list)
    sent_many: list[tuple[list[str], str, str, dict[str, str]]] = field(default_factory=list)

    async def send_one(self, token: str, title: str, body: str, data: dict[str, str]) -> bool:
        self.sent_one.append((token, title, body, data))
        return token not in self.failing_tokens

    async def send_many(
        self, tokens: list[str], title: str, body: str, data: dict[str, str]
    ) -> MulticastResult:
        self.sent_many.append((tokens, title, body, data))
        return MulticastResult.from_results([t not in self.failing_tokens for t in tokens])

    @property
    def attempts(self) -> int:
        return len(self.sent_one) + sum(len(batch[0]) for batch in self.sent_many)


@dataclass
class FakePublisher:
    events: list[tuple[UUID, str, dict[str, Any]]] = field(default_factory=list)

    async def publish(self, chat_id: UUID, event: str, payload: dict[str, Any]) -> None:
        self.events.append((chat_id, event, payload))

    @property
    def event_types(self) -> list[str]:
        return [e[1] for e in self.events]
