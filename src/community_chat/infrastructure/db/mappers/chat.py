from __future__ import annotations

from community_chat.domain.entities.chat import Chat
from community_chat.infrastructure.db.models.chat import ChatModel


def model_to_entity(model: ChatModel) -> Chat:
    return Chat(
        id=model.id,
        is_public=model.is_public,
        tenant_scope=model.tenant_scope,
        display_name=model.display_name,
        participants=tuple(p.subject_id for p in model.participants),
        last_message_text=model.last_message_text,
        last_message_at=model.last_message_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: Chat) -> dict:
    """Column values for an INSERT of the chat row (participants excluded)."""
    return {
        "id": entity.id,
        "is_public": entity.is_public,
        "tenant_scope": entity.tenant_scope,
        "display_name": entity.display_name,
        "last_message_text": entity.last_message_text,
        "last_message_at": entity.last_message_at,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }
