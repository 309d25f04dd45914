"""Seed development data: members, a direct chat and a tenant public chat."""
from __future__ import annotations

import asyncio
import logging

from community_chat.application.dto.principal import Principal
from community_chat.domain.entities.member import Member
from community_chat.domain.value_objects.enums import ParticipantKind
from community_chat.infrastructure.db.repositories.member import MemberDirectory
from community_chat.infrastructure.db.session import AsyncSessionLocal
from community_chat.infrastructure.db.uow import uow_scope
from community_chat.services import conversation_service, message_service

logger = logging.getLogger(__name__)

_MEMBERS = [
    Member(id=1, display_name="Asha Admin", referral_id="REF123"),
    Member(id=42, display_name="Ravi"),
    Member(id=43, display_name="Meera"),
]


async def seed() -> None:
    directory = MemberDirectory(AsyncSessionLocal)
    for member in _MEMBERS:
        await directory.upsert(member)

    ravi = Principal(kind=ParticipantKind.USER, subject_id=42, tenant_scope="REF123")
    meera = Principal(kind=ParticipantKind.USER, subject_id=43, tenant_scope="REF123")

    async with uow_scope() as uow:
        direct = await conversation_service.resolve_direct(42, 43, uow)
        for principal, text in [
            (ravi, "Hi Meera! Are you coming on Sunday?"),
            (meera, "Yes, see you at the temple."),
        ]:
            await message_service.append_message(direct.id, principal, text, uow)

        public = await conversation_service.resolve_scoped_public(42, "REF123", uow, directory)
        await message_service.append_message(public.id, ravi, "Hello everyone!", uow)

    logger.info("Seeded direct chat %s and public chat %s (%s)", direct.id, public.id, public.display_name)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
