"""Keyset pagination cursors.

Cursor format: base64("<iso-timestamp>|<uuid>"); the timestamp part is empty
for rows sorted without one (chats that never had a message).
"""
from __future__ import annotations

import base64
import binascii
from datetime import datetime
from uuid import UUID

from community_chat.application.exceptions import ValidationError


def encode_cursor(ts: datetime | None, uid: UUID) -> str:
    raw = f"{ts.isoformat() if ts else ''}|{uid}"
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime | None, UUID]:
    padded = cursor + "=" * ((4 - len(cursor) % 4) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode()).decode()
        ts_str, uid_str = raw.split("|", 1)
        return (datetime.fromisoformat(ts_str) if ts_str else None), UUID(uid_str)
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ValidationError("Malformed cursor") from exc
