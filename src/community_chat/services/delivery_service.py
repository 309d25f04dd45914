"""Post-commit delivery pipeline.

An append is acknowledged as soon as its transaction commits; fan-out and
notifications run afterwards on background queues. Fan-out uses a single
worker so subscribers see events in append order. Failures land in the
shared dead-letter buffer and never reach the caller.
"""
from __future__ import annotations

import logging
from collections import deque

from community_chat.application.ports.bus import ChannelPublisher
from community_chat.domain.entities.chat import Chat
from community_chat.domain.entities.message import Message
from community_chat.infrastructure.tasks.queue import BackgroundQueue, DeadLetter
from community_chat.services.fanout_service import publish_append, publish_summary
from community_chat.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class ChatDelivery:
    def __init__(
        self,
        publisher: ChannelPublisher,
        dispatcher: NotificationDispatcher,
        *,
        notify_workers: int = 4,
        dead_letter_limit: int = 100,
    ) -> None:
        self.publisher = publisher
        self.dispatcher = dispatcher
        self.dead_letters: deque[DeadLetter] = deque(maxlen=dead_letter_limit)
        self.fanout = BackgroundQueue("fanout", workers=1, dead_letters=self.dead_letters)
        self.notify = BackgroundQueue(
            "notify", workers=notify_workers, dead_letters=self.dead_letters,
        )

    async def start(self) -> None:
        await self.fanout.start()
        await self.notify.start()

    async def stop(self) -> None:
        await self.fanout.stop()
        await self.notify.stop()

    async def drain(self) -> None:
        await self.fanout.drain()
        await self.notify.drain()

    def stats(self) -> dict[str, int]:
        return {
            "fanout_pending": self.fanout.pending,
            "notify_pending": self.notify.pending,
            "failed": self.fanout.failed + self.notify.failed,
            "dead_letters": len(self.dead_letters),
        }

    def message_appended(
        self,
        chat: Chat,
        message: Message,
        actor_id: int,
        sender_name: str | None = None,
    ) -> None:
        self.fanout.submit(
            f"fanout:{message.id}",
            lambda: publish_append(self.publisher, message, chat),
        )
        self.notify.submit(
            f"notify:{message.id}",
            lambda: self.dispatcher.notify_participants(
                chat, message, actor_id, sender_name=sender_name,
            ),
        )
        logger.debug("Scheduled delivery of message %s", message.id)

    def summary_changed(self, chat: Chat) -> None:
        self.fanout.submit(
            f"summary:{chat.id}",
            lambda: publish_summary(self.publisher, chat),
        )
