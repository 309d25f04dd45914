from __future__ import annotations

from community_chat.domain.entities.notification import Notification
from community_chat.infrastructure.db.models.notification import NotificationModel


def model_to_entity(model: NotificationModel) -> Notification:
    return Notification(
        id=model.id,
        recipient_id=model.recipient_id,
        title=model.title,
        body=model.body,
        type=model.type,
        payload=dict(model.payload or {}),
        is_read=model.is_read,
        created_at=model.created_at,
    )


def entity_to_model(entity: Notification) -> NotificationModel:
    return NotificationModel(
        id=entity.id,
        recipient_id=entity.recipient_id,
        title=entity.title,
        body=entity.body,
        type=entity.type,
        payload=entity.payload,
        is_read=entity.is_read,
    )
