"""Time utilities shared across tetrascan components."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Protocol


def utc_now_str() -> str:
    """Return the current UTC timestamp as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class Clock(Protocol):
    """Anything with a monotonic ``now`` and an awaitable ``sleep``."""

    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class MonotonicClock:
    """Wall-independent clock used to budget captures and sweeps.

    Components take a clock instead of calling ``time`` directly so elapsed
    time can be driven by a fake clock in tests.
    """

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def elapsed_seconds(clock: Clock, start: float) -> float:
    """Seconds elapsed on ``clock`` since the ``start`` reading."""
    return clock.now() - start


def elapsed_whole_seconds(clock: Clock, start: float) -> int:
    """Elapsed time truncated to whole seconds."""
    return int(elapsed_seconds(clock, start))
