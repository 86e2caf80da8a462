# File: tests/conftest.py
import json
import random
from pathlib import Path
from typing import Any, Dict, List

import pytest

from page_harvest.backoff import BackoffScheduler
from page_harvest.config import DelayRange, HarvestConfig
from page_harvest.crawler.models import PageData

ROOT_URL = "https://example.com/explore/locations/DE/germany/"
PREFIX = "https://example.com/explore/locations/"


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested wait (seconds)."""

    def __init__(self) -> None:
        self.waits: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


class ScriptedFetcher:
    """
    Fake page fetcher.

    ``script`` maps a URL to the outcomes of successive fetches: a list of items
    (served as JSON) or an exception to raise. The last outcome repeats; URLs
    without a script serve an empty page.
    """

    def __init__(self, script: Dict[str, List[Any]]) -> None:
        self.script = {url: list(outcomes) for url, outcomes in script.items()}
        self.calls: List[str] = []
        self.entered = False
        self.exited = False

    async def __aenter__(self) -> "ScriptedFetcher":
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exited = True

    async def fetch(self, url: str) -> PageData:
        self.calls.append(url)
        outcomes = self.script.get(url)
        if not outcomes:
            return PageData(url, "[]", 200)
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return PageData(url, json.dumps(outcome), 200)


def json_extractor(page: PageData, context=None):
    return json.loads(page.content)


@pytest.fixture()
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def scheduler(sleeper) -> BackoffScheduler:
    """Scheduler with the production constants and a recorded, instant sleep."""
    return BackoffScheduler(2000, 1000, sleep=sleeper, rng=random.Random(7))


@pytest.fixture()
def scripted_fetcher():
    """Factory: ``scripted_fetcher({url: [outcome, ...]})``."""
    return ScriptedFetcher


@pytest.fixture()
def extract_json():
    return json_extractor


@pytest.fixture()
def basic_config(tmp_path) -> HarvestConfig:
    """
    Config with fixed, distinguishable delays:
    page delay 10 ms, child delay 20 ms, backoff 100/200/... ms without jitter.
    """
    return HarvestConfig(
        root_url=ROOT_URL,
        output_path=tmp_path / "locations.json",
        link_prefix=PREFIX,
        backoff_base_ms=100,
        jitter_max_ms=0,
        page_delay=DelayRange(min_ms=10, max_ms=10),
        child_delay=DelayRange(min_ms=20, max_ms=20),
        fetcher="http",
    )


@pytest.fixture()
def output_file(basic_config) -> Path:
    return basic_config.output_path
