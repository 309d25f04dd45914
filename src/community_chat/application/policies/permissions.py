from __future__ import annotations

from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import ForbiddenError, NotFoundError
from community_chat.domain.entities.chat import Chat


def assert_chat_access(
    principal: Principal,
    chat: Chat | None,
    *,
    write: bool = False,
) -> Chat:
    """Raise if the chat doesn't exist or the principal may not use it.

    Direct chats accept writes only from their two participants. Public chats
    are open to existing members, to anyone of the same tenant scope and to
    admins; those callers join the chat on access.
    """
    if chat is None:
        raise NotFoundError("Chat not found")

    if chat.has_participant(principal.subject_id):
        return chat

    if chat.is_public and (principal.is_admin or chat.tenant_scope == principal.tenant_scope):
        return chat

    # Admins may read any direct chat but never post into one
    if principal.is_admin and not write:
        return chat

    raise ForbiddenError("Not a participant of this chat")


def assert_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
