"""
Extraction strategies for rendered listing pages.

Each extractor is a callable ``extract(page, context) -> list`` and is handed
to the paginator by the caller; the paginator knows nothing about the markup.
"""
from __future__ import annotations

from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from page_harvest.crawler.models import LocationItem, PageData
from page_harvest.utils import same_url


def _anchors(page: PageData, selector: str) -> List[tuple[Tag, str]]:
    """Anchors matching *selector* paired with their absolute ``href``."""
    soup = BeautifulSoup(page.content, "html.parser")
    found: List[tuple[Tag, str]] = []
    for tag in soup.select(selector):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str) or not href_val.strip():
            continue
        raw = href_val.strip()
        if raw.startswith(("mailto:", "javascript:")):
            continue
        found.append((tag, urljoin(page.url, raw)))
    return found


class ChildLinkExtractor:
    """Root level: URLs of child nodes, excluding the listing's own URL."""

    def __init__(self, prefix: str, selector: str = "main a") -> None:
        self.prefix = prefix
        self.selector = selector

    def __call__(self, page: PageData, context: Optional[str] = None) -> List[str]:
        urls: List[str] = []
        for _, url in _anchors(page, self.selector):
            if not url.startswith(self.prefix):
                continue
            if context is not None and same_url(url, context):
                continue
            urls.append(url)
        return urls


class LeafItemExtractor:
    """Child level: ``{name, url}`` records for labelled anchors under the prefix."""

    def __init__(self, prefix: str, selector: str = "main a") -> None:
        self.prefix = prefix
        self.selector = selector

    def __call__(self, page: PageData, context: Optional[str] = None) -> List[LocationItem]:
        data: List[LocationItem] = []
        for tag, url in _anchors(page, self.selector):
            name = tag.get_text().strip()
            if name and url.startswith(self.prefix):
                data.append({"name": name, "url": url})
        return data


__all__ = ["ChildLinkExtractor", "LeafItemExtractor"]
