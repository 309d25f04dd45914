from __future__ import annotations

from types import SimpleNamespace

import pytest
from firebase_admin import messaging

from community_chat.config import settings
from community_chat.infrastructure.push import factory, fcm
from community_chat.infrastructure.push.fcm import DisabledPushProvider, FirebasePushProvider

_DATA = {"type": "chat", "chat_id": "c1", "is_group_chat": "true"}


@pytest.fixture
def provider(monkeypatch):
    push = FirebasePushProvider("/nonexistent/creds.json", timeout=1.0, batch_size=2)
    monkeypatch.setattr(push, "_get_app", lambda: None)
    return push


@pytest.mark.asyncio
async def test_multicast_batches_and_counts(provider, monkeypatch):
    batches: list[list[str]] = []

    def _send(message, app=None):
        batches.append(list(message.tokens))
        return SimpleNamespace(
            responses=[SimpleNamespace(success=t != "bad") for t in message.tokens],
        )

    monkeypatch.setattr(fcm.messaging, "send_each_for_multicast", _send)

    result = await provider.send_many(["a", "bad", "c"], "My Connect Chat", "Ravi: hi", _DATA)

    assert sorted(batches) == [["a", "bad"], ["c"]]
    assert (result.success_count, result.failure_count) == (2, 1)
    assert result.results == [True, False, True]


@pytest.mark.asyncio
async def test_multicast_without_valid_tokens(provider):
    result = await provider.send_many(["", "  "], "t", "b", _DATA)

    assert result.results == [False, False]


@pytest.mark.asyncio
async def test_unregistered_token_is_a_failure(provider, monkeypatch):
    def _send(message, app=None):
        raise messaging.UnregisteredError("Requested entity was not found.")

    monkeypatch.setattr(fcm.messaging, "send", _send)

    assert await provider.send_one("stale-token", "Ravi", "hi", _DATA) is False


@pytest.mark.asyncio
async def test_send_one_adds_click_action(provider, monkeypatch):
    sent: list[messaging.Message] = []

    def _send(message, app=None):
        sent.append(message)
        return "projects/p/messages/1"

    monkeypatch.setattr(fcm.messaging, "send", _send)

    assert await provider.send_one("tok", "Ravi", "hi", _DATA) is True
    assert sent[0].data["click_action"] == "FLUTTER_NOTIFICATION_CLICK"
    assert sent[0].data["is_group_chat"] == "true"


@pytest.mark.asyncio
async def test_disabled_provider_never_pushes():
    push = DisabledPushProvider()

    assert await push.send_one("tok", "t", "b", _DATA) is False
    result = await push.send_many(["a", "b"], "t", "b", _DATA)
    assert result.failure_count == 2


def test_factory_picks_provider_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "FCM_CREDENTIALS_FILE", None)
    assert isinstance(factory.build_push_provider(), DisabledPushProvider)

    monkeypatch.setattr(settings, "FCM_CREDENTIALS_FILE", "/etc/fcm.json")
    assert isinstance(factory.build_push_provider(), FirebasePushProvider)
