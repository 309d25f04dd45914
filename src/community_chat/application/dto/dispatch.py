from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True, slots=True)
class RecipientOutcome:
    recipient_id: int
    pushed: bool


@dataclass(frozen=True, slots=True)
class DispatchResult:
    chat_id: UUID | None
    recipients: list[RecipientOutcome] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.recipients if r.pushed)

    @property
    def failure_count(self) -> int:
        return len(self.recipients) - self.success_count
