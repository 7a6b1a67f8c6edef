"""Process-wide wiring of the store, the adapter and the sweeper.

The data-fetching layer receives :class:`ReadThroughCache` from here instead
of reaching for a module global, so tests can build isolated instances.
"""

from __future__ import annotations

from threading import Lock
from typing import Optional

from query_cache.cache.read_through import ReadThroughCache
from query_cache.cache.store import CacheStore
from query_cache.config.settings import CacheSettings
from query_cache.logging import configure_logging, get_logger
from query_cache.pipeline.sweeper import BackgroundSweeper


logger = get_logger(__name__, component="runtime")


class QueryCacheRuntime:
    """One store, its read-through adapter and its background sweeper."""

    def __init__(self, settings: Optional[CacheSettings] = None) -> None:
        self.settings = settings or CacheSettings()
        configure_logging(self.settings.log_level)
        self.store = CacheStore(default_ttl_ms=self.settings.default_ttl_ms)
        self.cache = ReadThroughCache(
            self.store, deduplicate=self.settings.deduplicate_inflight
        )
        self.sweeper = BackgroundSweeper(
            self.store, interval_ms=self.settings.sweep_interval_ms
        )

    def start(self) -> None:
        self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()
        logger.info({"event": "cache_runtime_stopped", **self.cache.stats()})

    async def __aenter__(self) -> "QueryCacheRuntime":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


_runtime: Optional[QueryCacheRuntime] = None
_runtime_lock = Lock()


def get_runtime() -> QueryCacheRuntime:
    """Return the process-wide runtime, building it on first use."""

    global _runtime
    with _runtime_lock:
        if _runtime is None:
            _runtime = QueryCacheRuntime()
        return _runtime


def use_query_cache() -> ReadThroughCache:
    """Return the adapter the application's query hooks should use."""

    return get_runtime().cache


__all__ = ["QueryCacheRuntime", "get_runtime", "use_query_cache"]
