from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Index, String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from community_chat.infrastructure.db.base import Base


class ChatModel(Base):
    __tablename__ = "chats"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tenant_scope: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # Exactly one of the two keys is set; each is unique so a pair or a scope
    # can never own two chats.
    direct_key: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    scope_key: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    last_message_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_message_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=text("now()"),
    )

    # relationships
    participants = relationship(
        "ChatParticipantModel",
        back_populates="chat",
        lazy="selectin",
        order_by="ChatParticipantModel.id",
    )
    messages = relationship("MessageModel", back_populates="chat", lazy="noload")

    __table_args__ = (
        Index("ix_chats_last_message", last_message_at.desc()),
    )
