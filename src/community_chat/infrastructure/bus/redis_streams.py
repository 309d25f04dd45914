"""Redis Streams consumer for member lifecycle events."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

OnStreamEventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


class RedisStreamConsumer:
    """XREADGROUP-based consumer for a single stream + consumer group.

    Entries whose handler raised stay pending and are re-read from this
    consumer's backlog on the next pass; after ``max_attempts`` failures an
    entry is acknowledged and dropped with an error log.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        stream: str,
        group: str,
        consumer: str,
        callback: OnStreamEventCallback,
        *,
        batch_size: int = 10,
        block_ms: int = 5000,
        max_attempts: int = 5,
    ) -> None:
        self._redis = redis
        self._stream = stream
        self._group = group
        self._consumer = consumer
        self._callback = callback
        self._batch_size = batch_size
        self._block_ms = block_ms
        self._max_attempts = max_attempts
        self._attempts: dict[str, int] = {}
        self._task: asyncio.Task[None] | None = None

    async def ensure_group(self) -> None:
        try:
            await self._redis.xgroup_create(
                self._stream, self._group, id="$", mkstream=True
            )
            logger.info("Created consumer group %s on %s", self._group, self._stream)
        except aioredis.ResponseError as e:
            if "BUSYGROUP" in str(e):
                logger.debug("Consumer group %s already exists", self._group)
            else:
                raise

    async def start(self) -> None:
        await self.ensure_group()
        self._task = asyncio.create_task(self._consume(), name="redis-stream-consumer")
        logger.info("Stream consumer started: stream=%s group=%s", self._stream, self._group)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Stream consumer stopped")

    async def _consume(self) -> None:
        # "0" replays this consumer's unacknowledged backlog, ">" reads new entries.
        read_id = "0"
        while True:
            try:
                entries = await self._redis.xreadgroup(
                    groupname=self._group,
                    consumername=self._consumer,
                    streams={self._stream: read_id},
                    count=self._batch_size,
                    block=None if read_id == "0" else self._block_ms,
                )
                messages = [m for _stream_name, batch in entries or [] for m in batch]
                if read_id == "0" and not messages:
                    read_id = ">"
                    continue
                failed = 0
                for msg_id, fields in messages:
                    if not await self.handle_entry(msg_id, fields):
                        failed += 1
                if failed:
                    # Retry failures from the backlog before reading further.
                    read_id = "0"
                    await asyncio.sleep(1)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Stream consumer error, retrying in 5s")
                await asyncio.sleep(5)

    async def handle_entry(self, msg_id: str, fields: dict[str, Any] | None) -> bool:
        """Run the callback for one entry. Returns False if it stays pending."""
        if not fields:
            # Entry was trimmed from the stream while pending.
            await self._redis.xack(self._stream, self._group, msg_id)
            return True

        event_type = fields.get("event_type", "unknown")
        try:
            await self._callback(event_type, fields)
        except Exception:
            attempts = self._attempts.get(msg_id, 0) + 1
            if attempts < self._max_attempts:
                self._attempts[msg_id] = attempts
                logger.exception(
                    "Error processing stream message %s (attempt %d)", msg_id, attempts,
                )
                return False
            logger.exception(
                "Dropping stream message %s (%s) after %d attempts",
                msg_id, event_type, attempts,
            )
        self._attempts.pop(msg_id, None)
        await self._redis.xack(self._stream, self._group, msg_id)
        return True
