from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Notification:
    id: UUID
    recipient_id: int
    title: str
    body: str
    type: str
    payload: dict[str, str] = field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None
