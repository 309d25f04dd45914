from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChatFilterDTO:
    is_public: bool | None = None
    member_id: int | None = None
    cursor: str | None = None
    limit: int = 20
