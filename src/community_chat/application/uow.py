from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from community_chat.application.repositories.chat import ChatReader, ChatWriter
from community_chat.application.repositories.message import MessageReader, MessageWriter
from community_chat.application.repositories.notification import (
    NotificationReader,
    NotificationWriter,
)
from community_chat.application.repositories.participant import ParticipantWriter


class UnitOfWork(Protocol):
    chats: ChatReader
    chats_w: ChatWriter
    participants_w: ParticipantWriter
    messages: MessageReader
    messages_w: MessageWriter
    notifications: NotificationReader
    notifications_w: NotificationWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
