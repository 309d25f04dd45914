from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    chat_id: UUID
    sender_id: int
    text: str
    sent_at: datetime
