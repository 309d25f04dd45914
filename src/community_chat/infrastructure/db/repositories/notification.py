from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from community_chat.domain.entities.notification import Notification
from community_chat.infrastructure.db.mappers import notification as mapper
from community_chat.infrastructure.db.models.notification import NotificationModel


class NotificationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_recipient(
        self,
        recipient_id: int,
        *,
        limit: int = 50,
    ) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_unread(self, recipient_id: int) -> int:
        stmt = select(func.count()).select_from(NotificationModel).where(
            NotificationModel.recipient_id == recipient_id,
            NotificationModel.is_read.is_(False),
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class NotificationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_many(self, notifications: list[Notification]) -> None:
        if not notifications:
            return
        self._session.add_all([mapper.entity_to_model(n) for n in notifications])
        await self._session.flush()

    async def mark_read(
        self,
        notification_id: UUID,
        recipient_id: int,
    ) -> Notification | None:
        stmt = select(NotificationModel).where(
            NotificationModel.id == notification_id,
            NotificationModel.recipient_id == recipient_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        model.is_read = True
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def mark_all_read(self, recipient_id: int) -> int:
        stmt = (
            update(NotificationModel)
            .where(
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.is_read.is_(False),
            )
            .values(is_read=True)
        )
        result = await self._session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def delete(self, notification_id: UUID, recipient_id: int) -> bool:
        stmt = delete(NotificationModel).where(
            NotificationModel.id == notification_id,
            NotificationModel.recipient_id == recipient_id,
        )
        result = await self._session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    async def delete_all(self, recipient_id: int) -> int:
        stmt = delete(NotificationModel).where(
            NotificationModel.recipient_id == recipient_id,
        )
        result = await self._session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
