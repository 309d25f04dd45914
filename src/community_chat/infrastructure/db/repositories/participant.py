from __future__ import annotations

from uuid import UUID

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from community_chat.infrastructure.db.models.participant import ChatParticipantModel


class ParticipantWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_if_absent(self, chat_id: UUID, subject_id: int) -> bool:
        stmt = (
            pg_insert(ChatParticipantModel)
            .values(chat_id=chat_id, subject_id=subject_id)
            .on_conflict_do_nothing(constraint="uq_chat_participant")
            .returning(ChatParticipantModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
