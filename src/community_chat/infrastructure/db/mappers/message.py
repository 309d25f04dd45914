from __future__ import annotations

from community_chat.domain.entities.message import Message
from community_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        chat_id=model.chat_id,
        sender_id=model.sender_id,
        text=model.text,
        sent_at=model.sent_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        chat_id=entity.chat_id,
        sender_id=entity.sender_id,
        text=entity.text,
        sent_at=entity.sent_at,
    )
