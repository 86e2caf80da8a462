"""
Data models for the PageHarvest crawler.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, TypedDict, Union

from page_harvest.utils import page_url


class LocationItem(TypedDict):
    """Leaf record collected from a child node's pages."""

    name: str
    url: str


# Extractors may return plain URLs (root level) or records (leaf level).
Item = Union[str, Dict[str, Any]]
Dataset = Dict[str, List[Item]]


@dataclass(frozen=True, slots=True)
class PageRequest:
    """One numbered page of a paginated listing."""

    base_url: str
    page_index: int

    @property
    def url(self) -> str:
        return page_url(self.base_url, self.page_index)


@dataclass(slots=True)
class PageData:
    """Holds the final URL, rendered HTML and HTTP status of a fetched page."""

    url: str
    content: str
    status: Optional[int] = None


# extract(document, context) -> items; context is the listing's base URL.
Extractor = Callable[[PageData, Optional[str]], Sequence[Item]]
