"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import WebSocket

from community_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks WebSocket connections per principal and chat channel subscriptions.

    Subscriptions belong to a single socket: a member with two tabs open
    receives a chat's events only on the tabs that joined it. Only the
    WebSocket transport calls ``connect``/``join``/``leave``; the chat core
    reaches subscribers solely through ``broadcast_to_chat``.
    """

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = {}
        self._subscriptions: dict[UUID, set[WebSocket]] = {}

    async def connect(self, ws: WebSocket, connection_key: str) -> None:
        await ws.accept()
        self._connections.setdefault(connection_key, set()).add(ws)
        logger.debug("WS connected: %s (total=%d)", connection_key, len(self._connections))

    def disconnect(self, ws: WebSocket, connection_key: str) -> None:
        conns = self._connections.get(connection_key)
        if conns:
            conns.discard(ws)
            if not conns:
                del self._connections[connection_key]
        for chat_id in [c for c, subs in self._subscriptions.items() if ws in subs]:
            self.leave(ws, chat_id)
        logger.debug("WS disconnected: %s", connection_key)

    def join(self, ws: WebSocket, chat_id: UUID) -> None:
        self._subscriptions.setdefault(chat_id, set()).add(ws)

    def leave(self, ws: WebSocket, chat_id: UUID) -> None:
        subs = self._subscriptions.get(chat_id)
        if subs:
            subs.discard(ws)
            if not subs:
                del self._subscriptions[chat_id]

    def subscriber_count(self, chat_id: UUID) -> int:
        return len(self._subscriptions.get(chat_id, ()))

    async def broadcast_to_chat(
        self,
        chat_id: UUID,
        event_type: str,
        data: dict[str, Any],
    ) -> int:
        """Send one WS message to every socket subscribed to a chat.

        Returns the number of sockets written to.
        """
        # Snapshot: join/leave may run while we await sends.
        subs = list(self._subscriptions.get(chat_id, ()))
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        sent = 0
        dead: list[WebSocket] = []
        for ws in subs:
            try:
                await ws.send_text(raw)
                sent += 1
            except Exception:
                dead.append(ws)
        for ws in dead:
            self._drop(ws)
        return sent

    def _drop(self, ws: WebSocket) -> None:
        for key, conns in list(self._connections.items()):
            if ws in conns:
                self.disconnect(ws, key)
                return
        for chat_id in [c for c, subs in self._subscriptions.items() if ws in subs]:
            self.leave(ws, chat_id)
