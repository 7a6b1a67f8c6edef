"""In-process TTL cache for remote finance queries."""

from __future__ import annotations

from .cache import CacheStore, ReadThroughCache, generate_key
from .pipeline import BackgroundSweeper, SweeperState
from .runtime import QueryCacheRuntime, get_runtime, use_query_cache

__version__ = "0.1.0"

__all__ = [
    "BackgroundSweeper",
    "CacheStore",
    "QueryCacheRuntime",
    "ReadThroughCache",
    "SweeperState",
    "__version__",
    "generate_key",
    "get_runtime",
    "use_query_cache",
]
