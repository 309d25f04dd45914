from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from community_chat.domain.entities.member import Member
from community_chat.infrastructure.db.mappers import member as mapper
from community_chat.infrastructure.db.models.member import MemberModel


class MemberDirectory:
    """Identity directory over the ``members`` read model.

    Each call runs in its own short session so that a failed lookup never
    aborts the caller's transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, member_id: int) -> Member | None:
        async with self._session_factory() as session:
            model = await session.get(MemberModel, member_id)
            return mapper.model_to_entity(model) if model else None

    async def get_many(self, member_ids: list[int]) -> dict[int, Member]:
        if not member_ids:
            return {}
        async with self._session_factory() as session:
            result = await session.execute(
                select(MemberModel).where(MemberModel.id.in_(member_ids))
            )
            return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def get_by_referral(self, referral_id: str) -> Member | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MemberModel).where(MemberModel.referral_id == referral_id)
            )
            model = result.scalar_one_or_none()
            return mapper.model_to_entity(model) if model else None

    async def upsert(self, member: Member) -> Member:
        """Insert or refresh a profile.

        An existing device token is kept, and so is a known referral id when
        the update carries none.
        """
        insert_stmt = pg_insert(MemberModel).values(
            id=member.id,
            display_name=member.display_name,
            referral_id=member.referral_id,
            device_token=member.device_token,
            updated_at=func.now(),
        )
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=[MemberModel.id],
            set_={
                "display_name": insert_stmt.excluded.display_name,
                "referral_id": func.coalesce(
                    insert_stmt.excluded.referral_id, MemberModel.referral_id,
                ),
                "updated_at": func.now(),
            },
        ).returning(MemberModel)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            model = result.scalar_one()
            entity = mapper.model_to_entity(model)
            await session.commit()
            return entity

    async def set_device_token(self, member_id: int, token: str | None) -> None:
        stmt = (
            update(MemberModel)
            .where(MemberModel.id == member_id)
            .values(device_token=token)
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()
