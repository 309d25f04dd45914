"""Conversation resolution: one direct chat per pair, one public chat per tenant scope."""
from __future__ import annotations

import dataclasses
import logging
import uuid

from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import ValidationError
from community_chat.application.policies.permissions import assert_chat_access
from community_chat.application.ports.clock import Clock, SystemClock
from community_chat.application.ports.identity import IdentityDirectory
from community_chat.application.uow import UnitOfWork
from community_chat.config import settings
from community_chat.domain.entities.chat import Chat, direct_key, scope_key

logger = logging.getLogger(__name__)

DIRECT_CHAT_NAME = "Direct chat"

_clock: Clock = SystemClock()


def _new_chat(
    *,
    is_public: bool,
    display_name: str,
    participants: tuple[int, ...],
    tenant_scope: str | None = None,
    clock: Clock,
) -> Chat:
    now = clock.now()
    return Chat(
        id=uuid.uuid4(),
        is_public=is_public,
        tenant_scope=tenant_scope,
        display_name=display_name,
        participants=participants,
        last_message_text=None,
        last_message_at=None,
        created_at=now,
        updated_at=now,
    )


async def resolve_direct(
    actor_id: int,
    other_id: int,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> Chat:
    """Return the direct chat between two members, creating it on first contact."""
    if actor_id == other_id:
        raise ValidationError("Cannot open a direct chat with yourself")

    key = direct_key(actor_id, other_id)
    existing = await uow.chats.get_direct(key)
    if existing is not None:
        return existing

    chat = _new_chat(
        is_public=False,
        display_name=DIRECT_CHAT_NAME,
        participants=(actor_id, other_id),
        clock=clock,
    )
    created = await uow.chats_w.create_direct_if_absent(chat, key)
    await uow.commit()
    if created:
        logger.info("Created direct chat %s for %s", chat.id, key)

    resolved = await uow.chats.get_direct(key)
    assert resolved is not None
    return resolved


async def _scope_display_name(
    tenant_scope: str | None,
    directory: IdentityDirectory,
) -> str:
    fallback = settings.PUBLIC_CHAT_DEFAULT_NAME
    if not tenant_scope:
        return fallback
    try:
        owner = await directory.get_by_referral(tenant_scope)
    except Exception:
        # A display label is not worth failing the request for.
        logger.warning("Owner lookup for scope %s failed", tenant_scope, exc_info=True)
        return fallback
    if owner is None or not owner.display_name:
        return fallback
    return owner.display_name


async def ensure_membership(
    chat: Chat,
    member_id: int,
    uow: UnitOfWork,
) -> tuple[Chat, bool]:
    """Add ``member_id`` to a chat unless already present. Does not commit.

    A concurrent add of the same member is absorbed by the store and
    reported as not added.
    """
    if chat.has_participant(member_id):
        return chat, False
    added = await uow.participants_w.add_if_absent(chat.id, member_id)
    if not added:
        return chat, False
    return dataclasses.replace(chat, participants=(*chat.participants, member_id)), True


async def resolve_scoped_public(
    actor_id: int,
    tenant_scope: str | None,
    uow: UnitOfWork,
    directory: IdentityDirectory,
    *,
    clock: Clock = _clock,
) -> Chat:
    """Return the public chat of a tenant scope (None = default) and join the actor to it."""
    key = scope_key(tenant_scope)
    chat = await uow.chats.get_public(key)

    if chat is None:
        candidate = _new_chat(
            is_public=True,
            display_name=await _scope_display_name(tenant_scope, directory),
            participants=(actor_id,),
            tenant_scope=tenant_scope or None,
            clock=clock,
        )
        if await uow.chats_w.create_public_if_absent(candidate, key):
            logger.info(
                "Created public chat %s for scope %r (%s)",
                candidate.id, tenant_scope, candidate.display_name,
            )
        chat = await uow.chats.get_public(key)
        assert chat is not None

    chat, added = await ensure_membership(chat, actor_id, uow)
    await uow.commit()
    if added:
        logger.debug("Member %d joined public chat %s", actor_id, chat.id)
    return chat


async def list_direct_chats(
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Chat]:
    return await uow.chats.list_direct_for_member(
        principal.subject_id, cursor=cursor, limit=limit,
    )


async def get_chat(
    chat_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Chat:
    chat = await uow.chats.get_by_id(chat_id)
    return assert_chat_access(principal, chat)
