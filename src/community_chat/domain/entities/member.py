from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Member:
    """Directory entry for an identity that can take part in chats."""

    id: int
    display_name: str
    referral_id: str | None = None
    device_token: str | None = None
    updated_at: datetime | None = None
