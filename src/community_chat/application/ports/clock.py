from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol

TICK = timedelta(microseconds=1)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Default wall-clock implementation."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def now_after(clock: Clock, last: datetime | None) -> datetime:
    """Current time, bumped one tick past ``last`` if the clock lags behind it.

    Postgres stores microseconds, so one tick keeps the order after a round trip.
    """
    now = clock.now()
    if last is not None and now <= last:
        return last + TICK
    return now
