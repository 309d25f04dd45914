from __future__ import annotations

from typing import Protocol

from community_chat.application.dto.push import MulticastResult


class PushProvider(Protocol):
    async def send_one(
        self, token: str, title: str, body: str, data: dict[str, str],
    ) -> bool: ...

    async def send_many(
        self, tokens: list[str], title: str, body: str, data: dict[str, str],
    ) -> MulticastResult: ...
