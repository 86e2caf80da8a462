"""page_harvest.crawler: fetching, extraction and pagination."""

from .fetcher import BrowserFetcher, FetchError, HttpFetcher, PageFetcher, build_fetcher
from .link_extractor import ChildLinkExtractor, LeafItemExtractor
from .models import Item, LocationItem, PageData, PageRequest
from .paginator import PaginatedCollector, RetryExhaustedError

__all__ = [
    "BrowserFetcher",
    "ChildLinkExtractor",
    "FetchError",
    "HttpFetcher",
    "Item",
    "LeafItemExtractor",
    "LocationItem",
    "PageData",
    "PageFetcher",
    "PageRequest",
    "PaginatedCollector",
    "RetryExhaustedError",
    "build_fetcher",
]
