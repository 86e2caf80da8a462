"""
Paginated collection: walks ``?page=1, 2, ...`` of one listing until a page
yields nothing new, with retries, backoff and duplicate filtering.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional, Set

from page_harvest.backoff import BackoffScheduler
from page_harvest.config import DelayRange, HarvestConfig
from page_harvest.crawler.fetcher import FetchError, PageFetcher
from page_harvest.crawler.models import Extractor, Item, PageRequest
from page_harvest.logger import logger
from page_harvest.utils import canonical_key


class RetryExhaustedError(Exception):
    """All attempts for one page failed; the collection cannot continue."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"All {attempts} attempts failed for {url}")
        self.url = url
        self.attempts = attempts


class PaginatedCollector:
    """Drives a fetcher and an extractor across an incrementing page index."""

    def __init__(
        self,
        fetcher: PageFetcher,
        scheduler: BackoffScheduler,
        *,
        max_retries: int = 3,
        page_delay: DelayRange = DelayRange(min_ms=2000, max_ms=5000),
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self.fetcher = fetcher
        self.scheduler = scheduler
        self.max_retries = max_retries
        self.page_delay = page_delay

    @classmethod
    def from_config(
        cls, config: HarvestConfig, fetcher: PageFetcher, scheduler: BackoffScheduler
    ) -> PaginatedCollector:
        return cls(
            fetcher,
            scheduler,
            max_retries=config.max_retries,
            page_delay=config.page_delay,
        )

    async def collect_all(self, base_url: str, extract: Extractor) -> List[Item]:
        """Returns unique items of every page of *base_url* in first-seen order.

        Raises :class:`RetryExhaustedError` when a page fails ``max_retries`` times.
        """
        page_index = 1
        seen: Set[str] = set()
        collected: List[Item] = []

        while True:
            request = PageRequest(base_url, page_index)
            items = await self._fetch_page(request, extract)

            if not items:
                logger.info("Page %d of %s is empty. Ending pagination.", page_index, base_url)
                break

            added = 0
            for item in items:
                key = canonical_key(item)
                if key not in seen:
                    seen.add(key)
                    collected.append(item)
                    added += 1

            if added == 0:
                logger.info("No new items found on page %d. Ending pagination.", page_index)
                break

            logger.info("Page %d: %d new item(s), %d total", page_index, added, len(collected))
            page_index += 1
            await self.scheduler.polite(self.page_delay)

        return collected

    async def _fetch_page(self, request: PageRequest, extract: Extractor) -> List[Item]:
        url = request.url
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.max_retries + 1):
            logger.info("Scraping page: %s (attempt %d/%d)", url, attempt, self.max_retries)
            try:
                page = await self.fetcher.fetch(url)
                return list(extract(page, request.base_url))
            except (FetchError, asyncio.TimeoutError) as exc:
                last_error = exc
                logger.error("Attempt %d failed for %s. Reason: %s", attempt, url, exc)
                if attempt < self.max_retries:
                    await self.scheduler.backoff(attempt)
        raise RetryExhaustedError(url, self.max_retries) from last_error


__all__ = ["PaginatedCollector", "RetryExhaustedError"]
