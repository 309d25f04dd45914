from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: UUID
    title: str
    body: str
    type: str
    payload: dict[str, str]
    is_read: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class UnreadCountResponse(BaseModel):
    count: int


class BulkResultResponse(BaseModel):
    count: int


class TestNotificationResponse(BaseModel):
    recipient_id: int
    pushed: bool
