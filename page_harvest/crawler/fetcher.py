"""
Fetcher module: turns a URL into a rendered HTML document.

Every call to ``fetch`` works in a fresh client context (a new browser context
or a new HTTP session) that is released before the call returns, whatever the
outcome. Transient failures are reported as :class:`FetchError`.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence, runtime_checkable

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from page_harvest.config import HarvestConfig
from page_harvest.crawler.models import PageData
from page_harvest.logger import logger

# responses at or above this status fail the attempt
ERROR_STATUS_MIN = 400
BROWSER_ARGS: Sequence[str] = ("--no-sandbox", "--disable-setuid-sandbox")


class FetchError(Exception):
    """Transient failure of a single fetch attempt (network, timeout, navigation)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


@runtime_checkable
class PageFetcher(Protocol):
    async def fetch(self, url: str) -> PageData: ...

    async def __aenter__(self) -> "PageFetcher": ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...


class HttpFetcher:
    """Plain HTTP fetcher for listings that render without JavaScript."""

    def __init__(self, *, user_agent: str, timeout_ms: int) -> None:
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms

    async def __aenter__(self) -> HttpFetcher:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def fetch(self, url: str) -> PageData:
        timeout = ClientTimeout(total=self.timeout_ms / 1000)
        try:
            # new session per call: no cookies carried between attempts
            async with ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.user_agent},
                raise_for_status=False,
            ) as session:
                async with session.get(url) as resp:
                    if resp.status >= ERROR_STATUS_MIN:
                        raise FetchError(url, f"HTTP status {resp.status}")
                    text = await resp.text()
                    return PageData(str(resp.url), text, resp.status)
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timed out after {self.timeout_ms} ms") from exc
        except (ClientError, UnicodeDecodeError) as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc


class BrowserFetcher:
    """Headless Chromium (Playwright) fetcher.

    The browser lives for the whole ``async with`` block; each ``fetch`` opens
    its own browser context and closes it in ``finally``.
    """

    def __init__(
        self,
        *,
        user_agent: str,
        timeout_ms: int,
        headless: bool = True,
        wait_until: str = "networkidle",
        launch_args: Sequence[str] = BROWSER_ARGS,
    ) -> None:
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms
        self.headless = headless
        self.wait_until = wait_until
        self.launch_args = list(launch_args)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> BrowserFetcher:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless, args=self.launch_args
            )
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.info("Browser launched (headless=%s)", self.headless)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
                logger.info("Browser closed.")
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def fetch(self, url: str) -> PageData:
        if self._browser is None:
            raise RuntimeError("Browser not started; use 'async with BrowserFetcher(...)'")
        try:
            context = await self._browser.new_context(user_agent=self.user_agent)
        except PlaywrightError as exc:
            raise FetchError(url, exc.message) from exc
        try:
            page = await context.new_page()
            response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout_ms)
            status = response.status if response is not None else None
            if status is not None and status >= ERROR_STATUS_MIN:
                raise FetchError(url, f"HTTP status {status}")
            content = await page.content()
            return PageData(page.url or url, content, status)
        except PlaywrightError as exc:
            raise FetchError(url, exc.message) from exc
        finally:
            await context.close()


def build_fetcher(config: HarvestConfig) -> PageFetcher:
    """Creates the fetcher selected by ``config.fetcher``."""
    if config.fetcher == "http":
        return HttpFetcher(user_agent=config.user_agent, timeout_ms=config.fetch_timeout_ms)
    return BrowserFetcher(
        user_agent=config.user_agent,
        timeout_ms=config.fetch_timeout_ms,
        headless=config.headless,
        wait_until=config.wait_until,
    )


__all__ = [
    "BROWSER_ARGS",
    "BrowserFetcher",
    "FetchError",
    "HttpFetcher",
    "PageFetcher",
    "ERROR_STATUS_MIN",
    "build_fetcher",
]
