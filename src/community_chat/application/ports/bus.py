from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID


class ChannelPublisher(Protocol):
    """Broadcast an event to every live subscriber of a chat channel."""

    async def publish(self, chat_id: UUID, event: str, payload: dict[str, Any]) -> None: ...
