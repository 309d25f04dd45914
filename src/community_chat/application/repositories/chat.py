from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from community_chat.application.dto.chat import ChatFilterDTO
from community_chat.domain.entities.chat import Chat


class ChatReader(Protocol):
    async def get_by_id(self, chat_id: UUID) -> Chat | None: ...

    async def get_for_update(self, chat_id: UUID) -> Chat | None:
        """Load a chat and hold its row lock until the transaction ends."""
        ...

    async def get_direct(self, direct_key: str) -> Chat | None: ...

    async def get_public(self, scope_key: str) -> Chat | None: ...

    async def list_direct_for_member(
        self, member_id: int, *, cursor: str | None = None, limit: int = 20
    ) -> list[Chat]: ...

    async def list_for_admin(self, filters: ChatFilterDTO) -> list[Chat]: ...


class ChatWriter(Protocol):
    async def create_direct_if_absent(
        self, chat: Chat, direct_key: str
    ) -> bool:
        """Insert a direct chat with its two participants. False if the pair already has one."""
        ...

    async def create_public_if_absent(self, chat: Chat, scope_key: str) -> bool: ...

    async def set_summary(
        self, chat_id: UUID, text: str | None, ts: datetime | None
    ) -> None: ...

    async def delete_many(self, chat_ids: list[UUID]) -> int: ...
