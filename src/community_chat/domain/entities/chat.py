from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Chat:
    id: UUID
    is_public: bool
    tenant_scope: str | None
    display_name: str
    participants: tuple[int, ...]
    last_message_text: str | None
    last_message_at: datetime | None
    created_at: datetime
    updated_at: datetime

    def has_participant(self, subject_id: int) -> bool:
        return subject_id in self.participants

    def others(self, subject_id: int) -> list[int]:
        """Participants except ``subject_id``, in join order."""
        return [p for p in self.participants if p != subject_id]


def direct_key(a: int, b: int) -> str:
    """Order-independent key of a direct chat between two members."""
    low, high = sorted((a, b))
    return f"{low}:{high}"


def scope_key(tenant_scope: str | None) -> str:
    # The default (un-scoped) public chat is keyed by the empty string.
    return tenant_scope or ""
