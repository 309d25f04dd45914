from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from community_chat.application.exceptions import ValidationError
from community_chat.domain.entities.message import Message
from community_chat.infrastructure.db.mappers import message as mapper
from community_chat.infrastructure.db.models.message import MessageModel
from community_chat.infrastructure.db.repositories._cursor import decode_cursor


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_messages(
        self,
        chat_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.chat_id == chat_id)
            .order_by(MessageModel.sent_at.asc(), MessageModel.id.asc())
            .limit(limit)
        )
        if cursor:
            ts, mid = decode_cursor(cursor)
            if ts is None:
                raise ValidationError("Malformed cursor")
            stmt = stmt.where(
                (MessageModel.sent_at > ts)
                | ((MessageModel.sent_at == ts) & (MessageModel.id > mid))
            )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def get_tail(self, chat_id: UUID) -> Message | None:
        stmt = (
            select(MessageModel)
            .where(MessageModel.chat_id == chat_id)
            .order_by(MessageModel.sent_at.desc(), MessageModel.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def delete_many(self, chat_id: UUID, message_ids: list[UUID]) -> int:
        if not message_ids:
            return 0
        stmt = delete(MessageModel).where(
            MessageModel.chat_id == chat_id,
            MessageModel.id.in_(message_ids),
        )
        result = await self._session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
