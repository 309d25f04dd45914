from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from community_chat.api.v1.schemas.common import PaginatedResponse
from community_chat.application.exceptions import ValidationError
from community_chat.infrastructure.db.repositories._cursor import decode_cursor, encode_cursor
from tests.conftest import make_message


def test_cursor_keeps_microseconds():
    ts = datetime(2026, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
    uid = uuid.uuid4()

    assert decode_cursor(encode_cursor(ts, uid)) == (ts, uid)


def test_cursor_without_timestamp():
    uid = uuid.uuid4()

    assert decode_cursor(encode_cursor(None, uid)) == (None, uid)


@pytest.mark.parametrize("cursor", ["not-base64!", "bm9waXBl", ""])
def test_malformed_cursor(cursor):
    with pytest.raises(ValidationError):
        decode_cursor(cursor)


def test_full_page_carries_cursor_of_last_row():
    rows = [make_message(text=str(i)) for i in range(3)]

    page = PaginatedResponse[str].build(
        rows, limit=3, to_item=lambda m: m.text, sort_key=lambda m: (m.sent_at, m.id),
    )

    assert page.items == ["0", "1", "2"]
    assert decode_cursor(page.next_cursor) == (rows[-1].sent_at, rows[-1].id)


def test_short_page_has_no_cursor():
    page = PaginatedResponse[str].build(
        [make_message()], limit=50, to_item=lambda m: m.text, sort_key=lambda m: (m.sent_at, m.id),
    )

    assert page.next_cursor is None
