from __future__ import annotations

from typing import Protocol
from uuid import UUID


class ParticipantWriter(Protocol):
    async def add_if_absent(self, chat_id: UUID, subject_id: int) -> bool:
        """Add a member to a chat. Returns False when already present."""
        ...
