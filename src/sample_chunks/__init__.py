"""Bounded, absolutely indexed sample windows."""

from importlib import metadata

from .chunk import Chunk
from .config import StoreConfig, load_store_config
from .exceptions import CapacityExceeded, PruneOutOfRange, SampleChunksError
from .export import to_numpy, to_series
from .iteration import AlignedChunkIterator, ChunkIterator, iter_lockstep
from .logging_utils import configure_logging, log_event
from .series import ChunkedSeries
from .store import SeriesStore, replay
from .timeline import OffsetTimeline

try:
    __version__ = metadata.version("sample-chunks")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.1.0"

__all__ = [
    "Chunk",
    "ChunkIterator",
    "AlignedChunkIterator",
    "iter_lockstep",
    "ChunkedSeries",
    "OffsetTimeline",
    "SeriesStore",
    "replay",
    "StoreConfig",
    "load_store_config",
    "CapacityExceeded",
    "PruneOutOfRange",
    "SampleChunksError",
    "to_numpy",
    "to_series",
    "configure_logging",
    "log_event",
    "__version__",
]
