"""
Backoff scheduler: politeness delays and exponential retry backoff with jitter.
"""
from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, Optional, Tuple

from page_harvest.config import DelayRange, HarvestConfig
from page_harvest.logger import logger

SleepFunc = Callable[[float], Awaitable[None]]


class BackoffScheduler:
    """Computes and awaits wait durations.

    ``sleep`` and ``rng`` are injectable so tests can record waits instead of
    spending wall-clock time.
    """

    def __init__(
        self,
        base_ms: int = 2000,
        jitter_max_ms: int = 1000,
        *,
        sleep: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if base_ms < 0 or jitter_max_ms < 0:
            raise ValueError("base_ms and jitter_max_ms must be >= 0")
        self.base_ms = base_ms
        self.jitter_max_ms = jitter_max_ms
        self._sleep: SleepFunc = sleep or asyncio.sleep
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, config: HarvestConfig, **kwargs) -> BackoffScheduler:
        return cls(config.backoff_base_ms, config.jitter_max_ms, **kwargs)

    def pick(self, min_ms: int, max_ms: int) -> int:
        """Uniform integer in ``[min_ms, max_ms]``."""
        if min_ms > max_ms:
            raise ValueError(f"min_ms ({min_ms}) > max_ms ({max_ms})")
        return self._rng.randint(min_ms, max_ms)

    async def delay(self, min_ms: int, max_ms: int) -> int:
        """Waits a random duration from the range and returns it (ms)."""
        duration = self.pick(min_ms, max_ms)
        logger.info("Waiting for %.1f seconds...", duration / 1000)
        await self._sleep(duration / 1000)
        return duration

    async def polite(self, window: DelayRange) -> int:
        return await self.delay(window.min_ms, window.max_ms)

    def retry_window(self, attempt: int) -> Tuple[int, int]:
        """Bounds of the wait after failed attempt *attempt* (1-based)."""
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        lower = self.base_ms * 2 ** (attempt - 1)
        return lower, lower + self.jitter_max_ms

    async def backoff(self, attempt: int) -> int:
        lower, upper = self.retry_window(attempt)
        logger.info("Backing off before retry %d (%d-%d ms)", attempt + 1, lower, upper)
        return await self.delay(lower, upper)


__all__ = ["BackoffScheduler", "SleepFunc"]
