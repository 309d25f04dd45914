from __future__ import annotations

from dataclasses import dataclass, field

from community_chat.domain.value_objects.enums import ParticipantKind


@dataclass(frozen=True, slots=True)
class Principal:
    """The verified caller behind a request or socket."""

    kind: ParticipantKind
    subject_id: int
    roles: list[str] = field(default_factory=list)
    display_name: str | None = None
    # Referral code of the community the member belongs to.
    tenant_scope: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.kind == ParticipantKind.ADMIN or "admin" in self.roles

    @property
    def label(self) -> str:
        return self.display_name or f"Member {self.subject_id}"

    @property
    def connection_key(self) -> str:
        return f"{self.kind}:{self.subject_id}"
