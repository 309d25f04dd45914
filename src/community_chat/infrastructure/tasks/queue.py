"""In-process background job queue with a dead-letter buffer.

Used to detach real-time fan-out and notification dispatch from the
request/response cycle. A queue with a single worker runs jobs strictly in
submission order.
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

JobFactory = Callable[[], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class DeadLetter:
    queue: str
    job: str
    error: str
    failed_at: datetime


class BackgroundQueue:
    def __init__(
        self,
        name: str,
        *,
        workers: int = 1,
        dead_letters: deque[DeadLetter] | None = None,
        dead_letter_limit: int = 100,
    ) -> None:
        self._name = name
        self._workers = max(1, workers)
        self._queue: asyncio.Queue[tuple[str, JobFactory]] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []
        self.dead_letters = (
            dead_letters if dead_letters is not None else deque(maxlen=dead_letter_limit)
        )
        self.processed = 0
        self.failed = 0

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, job: str, factory: JobFactory) -> None:
        """Enqueue a job; ``factory`` is called by a worker to obtain the coroutine."""
        self._queue.put_nowait((job, factory))

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._run(), name=f"{self._name}-worker-{i}")
            for i in range(self._workers)
        ]
        logger.info("Background queue %s started (workers=%d)", self._name, self._workers)

    async def stop(self, *, drain_timeout: float = 5.0) -> None:
        if not self._tasks:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Background queue %s stopped with %d pending jobs",
                self._name, self._queue.qsize(),
            )
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Background queue %s stopped", self._name)

    async def drain(self) -> None:
        """Wait until every submitted job has finished."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            job, factory = await self._queue.get()
            try:
                await factory()
                self.processed += 1
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.failed += 1
                logger.exception("Background job %s failed on queue %s", job, self._name)
                self.dead_letters.append(
                    DeadLetter(
                        queue=self._name,
                        job=job,
                        error=repr(exc),
                        failed_at=datetime.now(timezone.utc),
                    )
                )
            finally:
                self._queue.task_done()
