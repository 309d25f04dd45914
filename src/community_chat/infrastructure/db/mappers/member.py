from __future__ import annotations

from community_chat.domain.entities.member import Member
from community_chat.infrastructure.db.models.member import MemberModel


def model_to_entity(model: MemberModel) -> Member:
    return Member(
        id=model.id,
        display_name=model.display_name,
        referral_id=model.referral_id,
        device_token=model.device_token,
        updated_at=model.updated_at,
    )
