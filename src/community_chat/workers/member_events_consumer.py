"""Consumer for member lifecycle events via Redis Streams."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

import redis.asyncio as aioredis

from community_chat.application.ports.identity import IdentityDirectory
from community_chat.config import settings
from community_chat.infrastructure.bus.redis_streams import RedisStreamConsumer
from community_chat.infrastructure.db.repositories.member import MemberDirectory
from community_chat.infrastructure.db.session import AsyncSessionLocal
from community_chat.infrastructure.db.uow import uow_scope
from community_chat.infrastructure.push.factory import build_push_provider
from community_chat.services import member_service
from community_chat.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class MemberEventHandler:
    """Routes stream events to the member service."""

    def __init__(
        self,
        directory: IdentityDirectory,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._directory = directory
        self._dispatcher = dispatcher

    async def __call__(self, event_type: str, fields: dict[str, Any]) -> None:
        if event_type == "user.updated":
            member = await member_service.handle_member_updated(fields, self._directory)
            logger.debug("Member %d profile refreshed", member.id)
        elif event_type == "user.status_changed":
            outcome = await member_service.handle_status_changed(fields, self._dispatcher)
            logger.info(
                "Member %d status -> %s (pushed=%s)",
                outcome.recipient_id, fields.get("status"), outcome.pushed,
            )
        elif event_type == "user.registered":
            await member_service.handle_member_registered(
                fields, self._directory, self._dispatcher,
            )
        else:
            logger.debug("Ignoring unknown event: %s", event_type)


async def run_consumer() -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    consumer_name = f"consumer-{uuid.uuid4().hex[:8]}"

    directory = MemberDirectory(AsyncSessionLocal)
    dispatcher = NotificationDispatcher(build_push_provider(), directory, uow_scope)

    consumer = RedisStreamConsumer(
        redis=redis,
        stream=settings.MEMBER_EVENTS_STREAM,
        group=settings.MEMBER_EVENTS_GROUP,
        consumer=consumer_name,
        callback=MemberEventHandler(directory, dispatcher),
    )
    await consumer.start()
    logger.info("Member events consumer started (%s)", consumer_name)

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await consumer.stop()
        await redis.aclose()


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run_consumer())


if __name__ == "__main__":
    main()
