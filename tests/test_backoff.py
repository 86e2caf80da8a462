# File: tests/test_backoff.py
import random

import pytest

from page_harvest.backoff import BackoffScheduler
from page_harvest.config import DelayRange


@pytest.mark.parametrize(
    "attempt,expected",
    [(1, (2000, 3000)), (2, (4000, 5000)), (3, (8000, 9000))],
)
def test_retry_window_doubles(attempt, expected):
    assert BackoffScheduler(2000, 1000).retry_window(attempt) == expected


def test_retry_window_rejects_attempt_zero():
    with pytest.raises(ValueError):
        BackoffScheduler().retry_window(0)


def test_negative_constants_rejected():
    with pytest.raises(ValueError):
        BackoffScheduler(-1, 0)


def test_pick_stays_in_inclusive_range():
    scheduler = BackoffScheduler(rng=random.Random(1))
    values = {scheduler.pick(3, 5) for _ in range(200)}
    assert values == {3, 4, 5}
    assert scheduler.pick(7, 7) == 7
    with pytest.raises(ValueError):
        scheduler.pick(5, 3)


@pytest.mark.asyncio()
async def test_delay_sleeps_in_seconds(scheduler, sleeper):
    waited = await scheduler.delay(1500, 1500)
    assert waited == 1500
    assert sleeper.waits == [1.5]


@pytest.mark.asyncio()
async def test_polite_uses_window(scheduler, sleeper):
    waited = await scheduler.polite(DelayRange(min_ms=2000, max_ms=5000))
    assert 2000 <= waited <= 5000
    assert sleeper.waits == [waited / 1000]


@pytest.mark.asyncio()
async def test_backoff_strictly_increases(scheduler, sleeper):
    first = await scheduler.backoff(1)
    second = await scheduler.backoff(2)
    third = await scheduler.backoff(3)
    assert 2000 <= first <= 3000
    assert 4000 <= second <= 5000
    assert 8000 <= third <= 9000
    assert first < second < third
    assert len(sleeper.waits) == 3
