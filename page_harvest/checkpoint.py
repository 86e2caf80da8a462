"""
Checkpoint store: the harvested dataset as a single JSON document.

The document maps child keys to ordered lists of leaf items. It is read once at
start of a run (a missing or unreadable file counts as empty) and rewritten
after every completed child. Writes go to a temporary file that replaces the
target, so a crash mid-write never truncates earlier progress.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from pydantic import TypeAdapter, ValidationError

from page_harvest.crawler.models import Dataset
from page_harvest.logger import logger
from page_harvest.utils import child_key

_DATASET_ADAPTER = TypeAdapter(Dict[str, List[Any]])


class CheckpointWriteError(Exception):
    """The dataset could not be persisted."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not write checkpoint {path}: {reason}")
        self.path = path


class CheckpointStore:
    """JSON-file persistence of a :data:`Dataset`."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Dataset:
        """Returns the stored dataset, or ``{}`` if absent or unparsable."""
        if not self.path.exists():
            logger.info("No checkpoint at %s. Starting fresh.", self.path)
            return {}
        logger.info("Found existing data file %s. Attempting to resume session...", self.path)
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            data: Dataset = _DATASET_ADAPTER.validate_python(raw, strict=True)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Could not parse existing data file %s. Starting fresh. (%s)", self.path, exc)
            return {}
        logger.info("Successfully loaded %d previously scraped child node(s).", len(data))
        return data

    def save(self, dataset: Dataset) -> Path:
        """Atomically writes *dataset* with 2-space indentation, keys in insertion order."""
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            payload = json.dumps(dataset, ensure_ascii=False, indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as exc:
            tmp.unlink(missing_ok=True)
            raise CheckpointWriteError(self.path, str(exc)) from exc
        logger.debug("Checkpoint saved: %s (%d child node(s))", self.path, len(dataset))
        return self.path


def pending_children(urls: Iterable[str], dataset: Dataset) -> List[str]:
    """Child URLs whose key is not yet in *dataset*, discovery order preserved."""
    return [url for url in urls if child_key(url) not in dataset]


def summarize(dataset: Dataset) -> Dict[str, int]:
    """Item count per child key."""
    return {key: len(items) for key, items in dataset.items()}


__all__ = ["CheckpointStore", "CheckpointWriteError", "pending_children", "summarize"]
