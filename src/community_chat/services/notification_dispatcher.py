"""Best-effort push delivery plus in-app notification records.

Every recipient gets a persisted Notification whatever happens on the push
leg; push failures are logged and counted, never raised.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any

from community_chat.application.dto.dispatch import DispatchResult, RecipientOutcome
from community_chat.application.ports.identity import IdentityDirectory
from community_chat.application.ports.push import PushProvider
from community_chat.application.uow import UoWFactory
from community_chat.config import settings
from community_chat.domain.entities.chat import Chat
from community_chat.domain.entities.member import Member
from community_chat.domain.entities.message import Message
from community_chat.domain.entities.notification import Notification
from community_chat.domain.value_objects.enums import NotificationType

logger = logging.getLogger(__name__)

ELLIPSIS = "..."
DEFAULT_SENDER_NAME = "Someone"


def truncate(text: str, limit: int | None = None) -> str:
    limit = settings.NOTIFICATION_BODY_LIMIT if limit is None else limit
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def _stringify(data: dict[str, Any]) -> dict[str, str]:
    # FCM data payloads only carry strings.
    return {k: str(v).lower() if isinstance(v, bool) else str(v) for k, v in data.items()}


class NotificationDispatcher:
    def __init__(
        self,
        push: PushProvider,
        directory: IdentityDirectory,
        uow_factory: UoWFactory,
    ) -> None:
        self._push = push
        self._directory = directory
        self._uow_factory = uow_factory

    async def notify_participants(
        self,
        chat: Chat,
        message: Message,
        actor_id: int,
        *,
        sender_name: str | None = None,
    ) -> DispatchResult:
        """Notify every participant of ``chat`` except the sender of ``message``."""
        recipient_ids = chat.others(actor_id)
        if not recipient_ids:
            return DispatchResult(chat_id=chat.id)

        members = await self._lookup([*recipient_ids, actor_id])
        if not sender_name:
            sender = members.get(actor_id)
            sender_name = sender.display_name if sender else DEFAULT_SENDER_NAME

        if chat.is_public:
            title = f"{chat.display_name} {settings.PUBLIC_CHAT_TITLE_SUFFIX}"
            body = f"{sender_name}: {truncate(message.text)}"
        else:
            title = sender_name
            body = truncate(message.text)
        data = _stringify({
            "type": NotificationType.CHAT,
            "chat_id": chat.id,
            "is_group_chat": chat.is_public,
        })

        await self._persist(recipient_ids, title, body, NotificationType.CHAT, data)

        tokens = {
            rid: members[rid].device_token
            for rid in recipient_ids
            if rid in members and members[rid].device_token
        }
        if chat.is_public:
            pushed = await self._push_many(tokens, title, body, data)
        else:
            pushed = await self._push_direct(tokens, title, body, data)

        result = DispatchResult(
            chat_id=chat.id,
            recipients=[RecipientOutcome(rid, pushed.get(rid, False)) for rid in recipient_ids],
        )
        logger.info(
            "Dispatched message %s of chat %s: %d recipients, %d pushed, %d without push",
            message.id, chat.id, len(recipient_ids), result.success_count, result.failure_count,
        )
        return result

    async def notify_member(
        self,
        recipient_id: int,
        title: str,
        body: str,
        type: str = NotificationType.OTHER,
        payload: dict[str, Any] | None = None,
    ) -> RecipientOutcome:
        """Single-recipient notification for non-chat events."""
        data = _stringify({"type": type, **(payload or {})})
        await self._persist([recipient_id], title, body, type, data)

        member = (await self._lookup([recipient_id])).get(recipient_id)
        if member is None or not member.device_token:
            return RecipientOutcome(recipient_id, False)
        pushed = await self._push_direct({recipient_id: member.device_token}, title, body, data)
        return RecipientOutcome(recipient_id, pushed.get(recipient_id, False))

    async def _lookup(self, member_ids: list[int]) -> dict[int, Member]:
        try:
            return await self._directory.get_many(member_ids)
        except Exception:
            # Without profiles we still persist inbox records, just skip push.
            logger.exception("Member lookup failed for %d ids", len(member_ids))
            return {}

    async def _persist(
        self,
        recipient_ids: list[int],
        title: str,
        body: str,
        type: str,
        data: dict[str, str],
    ) -> None:
        records = [
            Notification(
                id=uuid.uuid4(),
                recipient_id=rid,
                title=title,
                body=body,
                type=type,
                payload=dict(data),
            )
            for rid in recipient_ids
        ]
        try:
            async with self._uow_factory() as uow:
                await uow.notifications_w.add_many(records)
                await uow.commit()
        except Exception:
            logger.exception("Failed to persist %d notifications (%s)", len(records), type)

    async def _push_direct(
        self,
        tokens: dict[int, str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> dict[int, bool]:
        pushed: dict[int, bool] = {}
        for rid, token in tokens.items():
            try:
                pushed[rid] = await self._push.send_one(token, title, body, data)
            except Exception:
                logger.exception("Push to member %d failed", rid)
                pushed[rid] = False
        return pushed

    async def _push_many(
        self,
        tokens: dict[int, str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> dict[int, bool]:
        if not tokens:
            return {}
        recipients = list(tokens)
        try:
            result = await self._push.send_many(
                [tokens[rid] for rid in recipients], title, body, data,
            )
        except Exception:
            logger.exception("Multicast push to %d members failed", len(recipients))
            return {rid: False for rid in recipients}
        logger.debug(
            "Multicast result: %d success, %d failure",
            result.success_count, result.failure_count,
        )
        return {rid: ok for rid, ok in zip(recipients, result.results)}
