from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from community_chat.infrastructure.ws.manager import ConnectionManager

logger = logging.getLogger(__name__)


class LocalChannelPublisher:
    """Implements application.ports.bus.ChannelPublisher for a single process."""

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager

    async def publish(self, chat_id: UUID, event: str, payload: dict[str, Any]) -> None:
        sent = await self._manager.broadcast_to_chat(chat_id, event, payload)
        logger.debug("Published %s to chat %s (%d sockets)", event, chat_id, sent)
