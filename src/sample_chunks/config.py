"""Store configuration loading and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoreConfig(BaseModel):
    """Retention policy for a :class:`~sample_chunks.store.SeriesStore`."""

    model_config = ConfigDict(extra="forbid")

    capacity: Optional[int] = None
    max_age_s: Optional[float] = None
    shrink_slack: int = Field(default=0, ge=0)
    checkpoint_every: int = Field(default=1, ge=1)
    overflow: Literal["raise", "drop_oldest"] = "raise"
    series: List[str] = Field(default_factory=list)

    @field_validator("capacity")
    @classmethod
    def _positive_capacity(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("capacity must be positive")
        return value

    @field_validator("max_age_s")
    @classmethod
    def _positive_age(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("max_age_s must be positive")
        return value

    @field_validator("series")
    @classmethod
    def _unique_series(cls, value: List[str]) -> List[str]:
        duplicates = sorted({name for name in value if value.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate series names: {', '.join(duplicates)}")
        return value

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> "StoreConfig":
        return cls.model_validate(dict(cfg))


def load_store_config(path: str | Path) -> StoreConfig:
    """Load a store configuration from YAML or JSON."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    raw = yaml.safe_load(text) if path.suffix.lower() in {".yml", ".yaml"} else json.loads(text)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Store config file must contain a mapping/object at the top level")
    return StoreConfig.from_mapping(raw)
