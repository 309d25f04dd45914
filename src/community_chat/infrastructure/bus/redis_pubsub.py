"""Redis Pub/Sub relay: publish side and the subscriber background task."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine
from uuid import UUID

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from community_chat.infrastructure.bus.serializer import deserialize_event, serialize_event

logger = logging.getLogger(__name__)


class RedisChannelPublisher:
    """Implements application.ports.bus.ChannelPublisher across instances.

    Every event of every chat goes through one Redis channel, so events of a
    chat reach subscribers in the order they were published.
    """

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, chat_id: UUID, event: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(event, {"chat_id": chat_id, **payload})
        await self._redis.publish(self._channel, raw)


OnEventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


class RedisPubSubSubscriber:
    """Relays events published by any instance to this instance's callback."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEventCallback,
        *,
        retry_delay: float = 2.0,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._retry_delay = retry_delay
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Redis Pub/Sub subscriber stopped")

    async def _listen(self) -> None:
        # Pub/Sub has no replay: events published while disconnected are lost,
        # clients recover by re-listing messages after a reconnect.
        while True:
            try:
                await self._listen_once()
            except asyncio.CancelledError:
                raise
            except RedisError:
                logger.exception(
                    "Pub/Sub listener failed, resubscribing in %.1fs", self._retry_delay,
                )
                await asyncio.sleep(self._retry_delay)

    async def _listen_once(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    event_type, data = deserialize_event(message["data"])
                    await self._callback(event_type, data)
                except Exception:
                    logger.exception("Error processing pubsub message")
        finally:
            await pubsub.aclose()
