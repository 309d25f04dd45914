from __future__ import annotations

from typing import Protocol
from uuid import UUID

from community_chat.domain.entities.notification import Notification


class NotificationReader(Protocol):
    async def list_for_recipient(
        self, recipient_id: int, *, limit: int = 50
    ) -> list[Notification]: ...

    async def count_unread(self, recipient_id: int) -> int: ...


class NotificationWriter(Protocol):
    async def add_many(self, notifications: list[Notification]) -> None: ...

    async def mark_read(
        self, notification_id: UUID, recipient_id: int
    ) -> Notification | None: ...

    async def mark_all_read(self, recipient_id: int) -> int: ...

    async def delete(self, notification_id: UUID, recipient_id: int) -> bool: ...

    async def delete_all(self, recipient_id: int) -> int: ...
