"""Real-time fan-out of appended messages and chat summaries."""
from __future__ import annotations

import dataclasses
from typing import Any

from community_chat.application.ports.bus import ChannelPublisher
from community_chat.domain.entities.chat import Chat
from community_chat.domain.entities.message import Message
from community_chat.domain.value_objects.enums import ChatEvent
from community_chat.infrastructure.bus.serializer import to_jsonable


def message_payload(message: Message) -> dict[str, Any]:
    return to_jsonable(dataclasses.asdict(message))


def summary_payload(chat: Chat) -> dict[str, Any]:
    return {
        "id": str(chat.id),
        "display_name": chat.display_name,
        "is_public": chat.is_public,
        "participants": list(chat.participants),
        "last_message_text": chat.last_message_text,
        "last_message_at": chat.last_message_at.isoformat() if chat.last_message_at else None,
    }


async def publish_append(
    publisher: ChannelPublisher,
    message: Message,
    chat: Chat,
) -> None:
    """Emit exactly two events for one append: the message, then the summary."""
    await publisher.publish(
        chat.id,
        ChatEvent.MESSAGE_CREATED,
        {"chat_id": str(chat.id), "message": message_payload(message)},
    )
    await publish_summary(publisher, chat)


async def publish_summary(publisher: ChannelPublisher, chat: Chat) -> None:
    await publisher.publish(
        chat.id,
        ChatEvent.SUMMARY_UPDATED,
        {"chat_id": str(chat.id), "summary": summary_payload(chat)},
    )
