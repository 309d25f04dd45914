"""In-app notification inbox of the calling member."""
from __future__ import annotations

import uuid

from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import NotFoundError
from community_chat.application.uow import UnitOfWork
from community_chat.config import settings
from community_chat.domain.entities.notification import Notification


async def list_notifications(
    principal: Principal,
    uow: UnitOfWork,
    *,
    limit: int | None = None,
) -> list[Notification]:
    limit = min(limit or settings.NOTIFICATION_LIST_LIMIT, settings.NOTIFICATION_LIST_LIMIT)
    return await uow.notifications.list_for_recipient(principal.subject_id, limit=limit)


async def unread_count(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.notifications.count_unread(principal.subject_id)


async def mark_read(
    notification_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Notification:
    notification = await uow.notifications_w.mark_read(notification_id, principal.subject_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    await uow.commit()
    return notification


async def mark_all_read(principal: Principal, uow: UnitOfWork) -> int:
    count = await uow.notifications_w.mark_all_read(principal.subject_id)
    await uow.commit()
    return count


async def delete_notification(
    notification_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> None:
    deleted = await uow.notifications_w.delete(notification_id, principal.subject_id)
    if not deleted:
        raise NotFoundError("Notification not found")
    await uow.commit()


async def delete_all(principal: Principal, uow: UnitOfWork) -> int:
    count = await uow.notifications_w.delete_all(principal.subject_id)
    await uow.commit()
    return count
