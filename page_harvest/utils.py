"""page_harvest.utils: URL helpers, child-node keys and canonical item serialization."""

from __future__ import annotations

import json
from typing import Any, Sequence
from urllib.parse import urlparse

__all__: Sequence[str] = (
    "page_url",
    "child_key",
    "same_url",
    "canonical_key",
    "origin_prefix",
)


def page_url(base_url: str, page_index: int) -> str:
    """Builds ``base/?page=N``; a single trailing slash on *base_url* is dropped first."""
    if page_index < 1:
        raise ValueError(f"page index must be >= 1, got {page_index}")
    base = base_url[:-1] if base_url.endswith("/") else base_url
    return f"{base}/?page={page_index}"


def child_key(url: str) -> str:
    """Returns the last non-empty ``/``-separated segment of *url*."""
    parts = [part for part in url.split("/") if part]
    if not parts:
        raise ValueError(f"cannot derive a child key from {url!r}")
    return parts[-1]


def same_url(left: str, right: str) -> bool:
    """Compares two URLs ignoring trailing slashes."""
    return left.rstrip("/") == right.rstrip("/")


def canonical_key(item: Any) -> str:
    """Stable textual form of *item* used only for duplicate detection.

    Key order is preserved as produced by the extractor, so two records are the
    same only if they carry the same fields in the same order.
    """
    return json.dumps(item, ensure_ascii=False, separators=(",", ":"))


def origin_prefix(url: str) -> str:
    """``https://host/path`` → ``https://host/``."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}/"

