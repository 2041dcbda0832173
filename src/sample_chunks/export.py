"""Conversions from chunks to numpy and pandas containers."""

from __future__ import annotations

from typing import Any, Hashable

import numpy as np
import pandas as pd

from .chunk import Chunk


def to_numpy(chunk: Chunk[Any], dtype: Any = float) -> np.ndarray:
    """Retained values as a one-dimensional array, oldest first."""

    return np.asarray(chunk.values(), dtype=dtype)


def to_series(chunk: Chunk[Any], name: Hashable | None = None) -> pd.Series:
    """Retained values as a Series indexed by absolute index."""

    index = pd.RangeIndex(chunk.base, chunk.next_index, name="index")
    return pd.Series(chunk.values(), index=index, name=name)
