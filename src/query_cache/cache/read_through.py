"""Read-through adapter that fronts async fetches with a :class:`CacheStore`."""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from query_cache.cache.store import CacheStore, generate_key
from query_cache.errors import CacheKeyError, describe_exception
from query_cache.logging import get_logger

Producer = Callable[[], Awaitable[Any]]

_MISSING = object()

logger = get_logger(__name__, component="read_through")


class ReadThroughCache:
    """Serve cached values and populate the store on a miss.

    Parameters
    ----------
    store:
        Backing store shared by every caller of this adapter.
    default_ttl_ms:
        TTL applied when a call does not pass one. ``None`` defers to the
        store's own default.
    deduplicate:
        When true, concurrent misses on the same key share a single producer
        invocation. Off by default: racing callers each run their producer
        and the last write wins.
    """

    def __init__(
        self,
        store: CacheStore,
        *,
        default_ttl_ms: Optional[float] = None,
        deduplicate: bool = False,
    ) -> None:
        self.store = store
        self.default_ttl_ms = default_ttl_ms
        self.deduplicate = deduplicate
        self._inflight: Dict[str, asyncio.Task] = {}
        self._pending: Set[asyncio.Task] = set()
        self._hits = 0
        self._misses = 0
        self._failures = 0

    async def get_cached_data(
        self,
        key: str,
        producer: Producer,
        ttl_ms: Optional[float] = None,
    ) -> Any:
        """Return the cached value for ``key`` or await ``producer`` for it.

        The producer's exception propagates unchanged and nothing is stored,
        so the next call retries. The store write happens in a task shielded
        from the caller, so cancelling the caller does not lose the result.
        """

        cached = self.store.get(key, _MISSING)
        if cached is not _MISSING:
            self._hits += 1
            return cached

        self._misses += 1
        if self.deduplicate:
            inflight = self._inflight.get(key)
            if inflight is not None and not inflight.done():
                return await asyncio.shield(inflight)

        task = asyncio.ensure_future(self._produce(key, producer, ttl_ms))
        self._pending.add(task)
        task.add_done_callback(self._forget)
        if self.deduplicate:
            self._inflight[key] = task
        return await asyncio.shield(task)

    async def _produce(self, key: str, producer: Producer, ttl_ms: Optional[float]) -> Any:
        try:
            value = await producer()
        except Exception as exc:
            self._failures += 1
            logger.warning(
                {
                    "event": "cache_producer_failed",
                    "key": key,
                    "error": describe_exception(exc),
                }
            )
            raise
        finally:
            # Later callers must start a fresh producer once this one settled.
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]
        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        self.store.set(key, value, ttl)
        return value

    def _forget(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        # Callers that were cancelled never retrieve the outcome.
        if not task.cancelled():
            task.exception()

    def invalidate_cache(self, pattern: Optional[str] = None) -> int:
        """Drop entries whose key contains ``pattern``, or everything.

        Matching is plain substring containment. Returns the number of
        entries removed.
        """

        if pattern:
            removed = self.store.delete_matching(pattern)
        else:
            removed = self.store.clear()
        logger.info(
            {"event": "cache_invalidated", "pattern": pattern, "removed": removed}
        )
        return removed

    def cached(
        self, prefix: str, *, ttl_ms: Optional[float] = None
    ) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
        """Decorate an async query so its keyword arguments key the cache.

        Example
        -------
        ::

            @cache.cached("transactions", ttl_ms=60_000)
            async def fetch_transactions(*, account_id, month):
                ...
        """

        def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
            @functools.wraps(func)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                if args:
                    raise CacheKeyError(
                        "Cached queries accept keyword arguments only",
                        context={"prefix": prefix, "function": func.__qualname__},
                    )
                key = generate_key(prefix, kwargs)
                return await self.get_cached_data(key, lambda: func(**kwargs), ttl_ms)

            wrapper.cache_prefix = prefix  # type: ignore[attr-defined]
            return wrapper

        return decorator

    def stats(self) -> dict[str, int]:
        """Return hit, miss and failure counters plus the raw entry count."""

        return {
            "hits": self._hits,
            "misses": self._misses,
            "failures": self._failures,
            "entries": len(self.store),
        }


__all__ = ["Producer", "ReadThroughCache"]
