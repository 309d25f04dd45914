"""Frames exchanged over /ws/chat."""
from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel

OutboundType = Literal["message.created", "summary.updated", "error", "pong"]


class WsInbound(BaseModel):
    type: str  # join | leave | message.send | ping
    data: dict[str, Any] = {}

    @property
    def chat_id(self) -> UUID | None:
        try:
            return UUID(str(self.data["chat_id"]))
        except (KeyError, ValueError):
            return None


class WsOutbound(BaseModel):
    type: OutboundType
    data: dict[str, Any] = {}
