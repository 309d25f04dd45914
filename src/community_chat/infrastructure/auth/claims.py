from __future__ import annotations

from typing import Any

from community_chat.application.dto.principal import Principal
from community_chat.domain.value_objects.enums import ParticipantKind


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from decoded JWT claims.

    ``tenant_scope`` is the referral id the member belongs to; members
    without one use the default public chat.
    """
    kind_raw = payload.get("kind", payload.get("role", "user"))
    kind = ParticipantKind(kind_raw) if kind_raw in ParticipantKind.__members__.values() else ParticipantKind.USER
    tenant_scope = payload.get("tenant_scope") or payload.get("referred_by")
    return Principal(
        kind=kind,
        subject_id=int(payload["sub"]),
        roles=payload.get("roles", []),
        display_name=payload.get("name") or payload.get("display_name"),
        tenant_scope=str(tenant_scope) if tenant_scope else None,
    )
