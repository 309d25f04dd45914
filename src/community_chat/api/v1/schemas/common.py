from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Generic, Iterable, TypeVar
from uuid import UUID

from pydantic import BaseModel

from community_chat.infrastructure.db.repositories._cursor import encode_cursor

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]  # type: ignore[type-var]
    next_cursor: str | None = None

    @classmethod
    def build(
        cls,
        rows: Iterable[Any],
        *,
        limit: int,
        to_item: Callable[[Any], T],
        sort_key: Callable[[Any], tuple[datetime | None, UUID]],
    ) -> PaginatedResponse[T]:
        """Wrap one page of rows; a full page carries the cursor of its last row."""
        rows = list(rows)
        next_cursor = encode_cursor(*sort_key(rows[-1])) if rows and len(rows) == limit else None
        return cls(items=[to_item(r) for r in rows], next_cursor=next_cursor)
