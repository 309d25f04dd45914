"""One-time script: create the Redis Streams consumer group for member events."""
from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

from community_chat.config import settings
from community_chat.infrastructure.bus.redis_streams import RedisStreamConsumer

logger = logging.getLogger(__name__)


async def _noop(_event_type: str, _fields: dict) -> None:
    return None


async def create_group() -> None:
    r = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    consumer = RedisStreamConsumer(
        redis=r,
        stream=settings.MEMBER_EVENTS_STREAM,
        group=settings.MEMBER_EVENTS_GROUP,
        consumer="bootstrap",
        callback=_noop,
    )
    try:
        await consumer.ensure_group()
        logger.info(
            "Consumer group '%s' ready on stream '%s'",
            settings.MEMBER_EVENTS_GROUP,
            settings.MEMBER_EVENTS_STREAM,
        )
    finally:
        await r.aclose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_group())


if __name__ == "__main__":
    main()
