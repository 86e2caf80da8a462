"""
Loading and validation of the PageHarvest configuration.
Pydantic describes the schema; YAML and JSON files are both accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union
from urllib.parse import urlparse

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from page_harvest.utils import origin_prefix

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class DelayRange(BaseModel):
    """Inclusive range of a politeness delay, in milliseconds."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_ms: int = Field(..., ge=0)
    max_ms: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> DelayRange:
        if self.min_ms > self.max_ms:
            raise ValueError(f"min_ms ({self.min_ms}) must not exceed max_ms ({self.max_ms})")
        return self


class HarvestConfig(BaseModel):
    """Configuration of one harvest run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    root_url: str = Field(..., description="Root listing whose pages enumerate child nodes.")
    output_path: Path = Field(Path("locations.json"), description="Checkpoint / result JSON file.")
    max_children: Optional[int] = Field(None, ge=1, description="Cap on child nodes processed per run.")

    max_retries: int = Field(3, ge=1, description="Fetch attempts per page.")
    backoff_base_ms: int = Field(2000, ge=0, description="Lower bound of the first retry wait.")
    jitter_max_ms: int = Field(1000, ge=0, description="Random extra added to every retry wait.")
    fetch_timeout_ms: int = Field(90_000, gt=0, description="Timeout of a single fetch attempt.")
    page_delay: DelayRange = Field(DelayRange(min_ms=2000, max_ms=5000))
    child_delay: DelayRange = Field(DelayRange(min_ms=3000, max_ms=6000))

    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent of every fetch.")
    fetcher: Literal["browser", "http"] = Field("browser", description="Page fetcher backend.")
    headless: bool = True
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "networkidle"

    link_prefix: Optional[str] = Field(None, description="Only links under this prefix are extracted.")
    anchor_selector: str = Field("main a", min_length=1, description="CSS selector of candidate anchors.")

    @field_validator("root_url")
    def _check_root_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"root_url must be an absolute http(s) URL, got {v!r}")
        return v

    @property
    def effective_link_prefix(self) -> str:
        """Explicit ``link_prefix`` or the origin of ``root_url``."""
        return self.link_prefix or origin_prefix(self.root_url)

    def override(self, **changes: Any) -> HarvestConfig:
        """Returns a validated copy with *changes* applied; ``None`` values are ignored."""
        data = self.model_dump(exclude_unset=True)
        data.update({k: v for k, v in changes.items() if v is not None})
        return HarvestConfig(**data)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> HarvestConfig:
    """
    Reads YAML or JSON and returns a validated HarvestConfig.
    Raises FileNotFoundError when the file is missing.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return HarvestConfig(**data)


__all__ = ["DelayRange", "HarvestConfig", "load_config", "ValidationError", "DEFAULT_USER_AGENT"]
