"""page_harvest.engine: two-level harvest of a root listing and its child listings."""

from __future__ import annotations

from typing import List, Optional

from page_harvest.backoff import BackoffScheduler
from page_harvest.checkpoint import CheckpointStore, CheckpointWriteError, pending_children
from page_harvest.config import HarvestConfig
from page_harvest.crawler.fetcher import PageFetcher, build_fetcher
from page_harvest.crawler.link_extractor import ChildLinkExtractor, LeafItemExtractor
from page_harvest.crawler.models import Dataset, Extractor
from page_harvest.crawler.paginator import PaginatedCollector
from page_harvest.logger import logger
from page_harvest.utils import child_key

__all__ = ["Orchestrator", "start_harvest"]


class Orchestrator:
    """Collects child URLs from the root listing, then the leaf items of each child.

    Progress is resumable: children already present in the checkpoint are
    skipped, the checkpoint is rewritten after every child, and whatever is in
    memory is flushed before a fatal error propagates.
    """

    def __init__(
        self,
        config: HarvestConfig,
        fetcher: PageFetcher,
        *,
        store: Optional[CheckpointStore] = None,
        scheduler: Optional[BackoffScheduler] = None,
        child_extractor: Optional[Extractor] = None,
        leaf_extractor: Optional[Extractor] = None,
    ) -> None:
        self.config = config
        self.store = store or CheckpointStore(config.output_path)
        self.scheduler = scheduler or BackoffScheduler.from_config(config)
        self.collector = PaginatedCollector.from_config(config, fetcher, self.scheduler)
        prefix = config.effective_link_prefix
        self.child_extractor = child_extractor or ChildLinkExtractor(prefix, config.anchor_selector)
        self.leaf_extractor = leaf_extractor or LeafItemExtractor(prefix, config.anchor_selector)

    async def run(self, root_url: Optional[str] = None) -> Dataset:
        """Harvests everything under *root_url* (default: ``config.root_url``) not yet in
        the checkpoint and returns the full dataset."""
        dataset = self.store.load()
        try:
            await self._harvest(root_url or self.config.root_url, dataset)
        except BaseException as exc:
            logger.critical("A critical error occurred during harvesting: %s. Saving progress...", exc)
            self._flush_after_failure(dataset)
            raise
        self.store.save(dataset)
        logger.info("Harvest finished. All data saved to %s", self.store.path)
        return dataset

    async def _harvest(self, root: str, dataset: Dataset) -> None:
        logger.info("Starting to scrape all child pages from: %s", root)
        child_urls = [str(url) for url in await self.collector.collect_all(root, self.child_extractor)]
        logger.info("Found %d unique child links across all pages.", len(child_urls))

        pending = self._unique_by_key(pending_children(child_urls, dataset))
        logger.info(
            "Total children found: %d. Children remaining to scrape: %d",
            len(child_urls),
            len(pending),
        )

        limit = self.config.max_children
        if limit is not None and len(pending) > limit:
            logger.warning("Limiting harvest to the first %d remaining children as configured.", limit)
            pending = pending[:limit]

        for counter, url in enumerate(pending, start=1):
            key = child_key(url)
            logger.info("Scraping child %d of %d: %s", counter, len(pending), url)
            items = await self.collector.collect_all(url, self.leaf_extractor)
            dataset[key] = items
            self.store.save(dataset)
            logger.info("Found %d unique item(s) for %s.", len(items), key)

            if counter < len(pending):
                await self.scheduler.polite(self.config.child_delay)

    @staticmethod
    def _unique_by_key(urls: List[str]) -> List[str]:
        seen = set()
        unique: List[str] = []
        for url in urls:
            key = child_key(url)
            if key in seen:
                logger.debug("Skipping %s: key %r already queued", url, key)
                continue
            seen.add(key)
            unique.append(url)
        return unique

    def _flush_after_failure(self, dataset: Dataset) -> None:
        try:
            self.store.save(dataset)
        except CheckpointWriteError as exc:
            logger.error("Progress could not be saved: %s", exc)
            return
        logger.info("Progress saved to %s. Restart to resume.", self.store.path)


async def start_harvest(config: HarvestConfig) -> Dataset:
    """Opens the configured fetcher and runs a full harvest with it."""
    async with build_fetcher(config) as fetcher:
        return await Orchestrator(config, fetcher).run()
