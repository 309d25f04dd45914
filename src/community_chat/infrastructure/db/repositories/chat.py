from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from community_chat.application.dto.chat import ChatFilterDTO
from community_chat.domain.entities.chat import Chat
from community_chat.infrastructure.db.mappers import chat as mapper
from community_chat.infrastructure.db.models.chat import ChatModel
from community_chat.infrastructure.db.models.participant import ChatParticipantModel
from community_chat.infrastructure.db.repositories._cursor import decode_cursor


def _apply_cursor(stmt: Select, cursor: str | None) -> Select:
    """Continue after the cursor row in (last_message_at DESC NULLS LAST, id) order."""
    if not cursor:
        return stmt
    ts, cid = decode_cursor(cursor)
    if ts is None:
        return stmt.where(ChatModel.last_message_at.is_(None), ChatModel.id > cid)
    return stmt.where(
        (ChatModel.last_message_at < ts)
        | ((ChatModel.last_message_at == ts) & (ChatModel.id > cid))
        | ChatModel.last_message_at.is_(None)
    )


class ChatReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _one(self, stmt: Select) -> Chat | None:
        # populate_existing refreshes participants that joined earlier in this session
        result = await self._session.execute(stmt.execution_options(populate_existing=True))
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def get_by_id(self, chat_id: UUID) -> Chat | None:
        return await self._one(select(ChatModel).where(ChatModel.id == chat_id))

    async def get_for_update(self, chat_id: UUID) -> Chat | None:
        stmt = select(ChatModel).where(ChatModel.id == chat_id).with_for_update()
        return await self._one(stmt)

    async def get_direct(self, direct_key: str) -> Chat | None:
        return await self._one(select(ChatModel).where(ChatModel.direct_key == direct_key))

    async def get_public(self, scope_key: str) -> Chat | None:
        return await self._one(select(ChatModel).where(ChatModel.scope_key == scope_key))

    async def list_direct_for_member(
        self,
        member_id: int,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Chat]:
        stmt = (
            select(ChatModel)
            .join(
                ChatParticipantModel,
                ChatParticipantModel.chat_id == ChatModel.id,
            )
            .where(
                ChatParticipantModel.subject_id == member_id,
                ChatModel.is_public.is_(False),
            )
            .order_by(ChatModel.last_message_at.desc().nullslast(), ChatModel.id)
            .limit(limit)
        )
        stmt = _apply_cursor(stmt, cursor)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_admin(self, filters: ChatFilterDTO) -> list[Chat]:
        stmt = select(ChatModel)
        if filters.is_public is not None:
            stmt = stmt.where(ChatModel.is_public.is_(filters.is_public))
        if filters.member_id is not None:
            stmt = stmt.join(
                ChatParticipantModel,
                ChatParticipantModel.chat_id == ChatModel.id,
            ).where(ChatParticipantModel.subject_id == filters.member_id)
        stmt = stmt.order_by(
            ChatModel.last_message_at.desc().nullslast(),
            ChatModel.id,
        ).limit(filters.limit)
        stmt = _apply_cursor(stmt, filters.cursor)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class ChatWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_direct_if_absent(self, chat: Chat, direct_key: str) -> bool:
        """Insert the chat unless its pair already has one.

        ON CONFLICT waits for a concurrent inserter of the same key to finish,
        so two first contacts never produce two rows.
        """
        stmt = (
            pg_insert(ChatModel)
            .values(**mapper.entity_to_values(chat), direct_key=direct_key)
            .on_conflict_do_nothing(index_elements=[ChatModel.direct_key])
            .returning(ChatModel.id)
        )
        return await self._insert_with_participants(stmt, chat)

    async def create_public_if_absent(self, chat: Chat, scope_key: str) -> bool:
        stmt = (
            pg_insert(ChatModel)
            .values(**mapper.entity_to_values(chat), scope_key=scope_key)
            .on_conflict_do_nothing(index_elements=[ChatModel.scope_key])
            .returning(ChatModel.id)
        )
        return await self._insert_with_participants(stmt, chat)

    async def _insert_with_participants(self, stmt, chat: Chat) -> bool:
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is None:
            return False
        if chat.participants:
            await self._session.execute(
                pg_insert(ChatParticipantModel)
                .values([
                    {"chat_id": chat.id, "subject_id": subject_id}
                    for subject_id in chat.participants
                ])
                .on_conflict_do_nothing(constraint="uq_chat_participant")
            )
        return True

    async def set_summary(
        self,
        chat_id: UUID,
        text: str | None,
        ts: datetime | None,
    ) -> None:
        stmt = (
            update(ChatModel)
            .where(ChatModel.id == chat_id)
            .values(last_message_text=text, last_message_at=ts)
        )
        await self._session.execute(stmt)

    async def delete_many(self, chat_ids: list[UUID]) -> int:
        if not chat_ids:
            return 0
        stmt = delete(ChatModel).where(ChatModel.id.in_(chat_ids))
        result = await self._session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
