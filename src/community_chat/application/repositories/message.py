from __future__ import annotations

from typing import Protocol
from uuid import UUID

from community_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_messages(
        self,
        chat_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[Message]: ...

    async def get_tail(self, chat_id: UUID) -> Message | None:
        """Most recently appended message of the chat."""
        ...


class MessageWriter(Protocol):
    async def add(self, message: Message) -> Message: ...

    async def delete_many(self, chat_id: UUID, message_ids: list[UUID]) -> int: ...
