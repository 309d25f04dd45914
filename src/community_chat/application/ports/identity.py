from __future__ import annotations

from typing import Protocol

from community_chat.application.dto.principal import Principal
from community_chat.domain.entities.member import Member


class TokenVerifier(Protocol):
    """Session collaborator: turns a bearer token into the calling Principal.

    Raises on an invalid or expired token.
    """

    async def verify(self, token: str) -> Principal: ...


class IdentityDirectory(Protocol):
    async def get(self, member_id: int) -> Member | None: ...

    async def get_many(self, member_ids: list[int]) -> dict[int, Member]: ...

    async def get_by_referral(self, referral_id: str) -> Member | None:
        """Member owning the given referral id (tenant scope), if any."""
        ...

    async def upsert(self, member: Member) -> Member: ...

    async def set_device_token(self, member_id: int, token: str | None) -> None: ...
