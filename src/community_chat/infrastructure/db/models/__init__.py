"""Import all models so Base.metadata knows every table."""
from community_chat.infrastructure.db.models.chat import ChatModel
from community_chat.infrastructure.db.models.member import MemberModel
from community_chat.infrastructure.db.models.message import MessageModel
from community_chat.infrastructure.db.models.notification import NotificationModel
from community_chat.infrastructure.db.models.participant import ChatParticipantModel

__all__ = [
    "ChatModel",
    "ChatParticipantModel",
    "MemberModel",
    "MessageModel",
    "NotificationModel",
]
