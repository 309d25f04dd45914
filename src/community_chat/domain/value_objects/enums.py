from __future__ import annotations

from enum import StrEnum


class ParticipantKind(StrEnum):
    USER = "user"
    ADMIN = "admin"


class NotificationType(StrEnum):
    CHAT = "chat"
    STATUS_CHANGE = "status_change"
    NEW_REGISTRATION = "new_registration"
    TEST = "test"
    OTHER = "other"


class ChatEvent(StrEnum):
    MESSAGE_CREATED = "message.created"
    SUMMARY_UPDATED = "summary.updated"
