from __future__ import annotations

import pytest

from community_chat.infrastructure.tasks.queue import BackgroundQueue


@pytest.mark.asyncio
async def test_single_worker_runs_in_order():
    queue = BackgroundQueue("test", workers=1)
    seen: list[int] = []

    async def job(i: int) -> None:
        seen.append(i)

    await queue.start()
    for i in range(5):
        queue.submit(f"job-{i}", lambda i=i: job(i))
    await queue.drain()
    await queue.stop()

    assert seen == [0, 1, 2, 3, 4]
    assert queue.processed == 5
    assert queue.running is False


@pytest.mark.asyncio
async def test_failures_go_to_dead_letters():
    queue = BackgroundQueue("test", workers=2)

    async def boom() -> None:
        raise RuntimeError("nope")

    async def ok() -> None:
        return None

    await queue.start()
    queue.submit("bad", boom)
    queue.submit("good", ok)
    await queue.drain()
    await queue.stop()

    assert queue.failed == 1
    assert queue.processed == 1
    (letter,) = queue.dead_letters
    assert letter.queue == "test"
    assert letter.job == "bad"
    assert "nope" in letter.error


@pytest.mark.asyncio
async def test_dead_letter_buffer_is_bounded():
    queue = BackgroundQueue("test", dead_letter_limit=2)

    async def boom() -> None:
        raise ValueError

    await queue.start()
    for i in range(4):
        queue.submit(f"bad-{i}", boom)
    await queue.drain()
    await queue.stop()

    assert [d.job for d in queue.dead_letters] == ["bad-2", "bad-3"]
