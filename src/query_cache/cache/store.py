"""In-process TTL store for query results."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Mapping, Optional

from query_cache.config.settings import DEFAULT_TTL_MS
from query_cache.logging import get_logger

KEY_SEPARATOR = ":"
PARAM_SEPARATOR = "|"

Clock = Callable[[], float]

logger = get_logger(__name__, component="cache_store")


def monotonic_ms() -> float:
    """Return a monotonic timestamp in milliseconds."""

    return time.monotonic() * 1000.0


@dataclass
class Entry:
    value: Any
    expires_at: float


def _render_param(value: Any) -> str:
    # Mirror how the web client stringifies scalars inside template literals.
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def generate_key(prefix: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Return a cache key for ``prefix`` and ``params``.

    Parameter names are sorted before rendering so two mappings with the same
    items always produce the same key regardless of insertion order. Values
    are stringified as-is; callers must pass scalars with a stable ``str``.

    >>> generate_key("tx", {"b": 2, "a": 1})
    'tx:a:1|b:2'
    """

    params = params or {}
    rendered = PARAM_SEPARATOR.join(
        f"{name}{KEY_SEPARATOR}{_render_param(params[name])}" for name in sorted(params)
    )
    return f"{prefix}{KEY_SEPARATOR}{rendered}"


class CacheStore:
    """Key to ``(value, expires_at)`` table with lazy and swept expiry.

    All operations take the same lock because even :meth:`get` may delete a
    stale entry. None of them block on I/O.
    """

    def __init__(
        self,
        *,
        default_ttl_ms: float = DEFAULT_TTL_MS,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._entries: Dict[str, Entry] = {}
        self._lock = Lock()

    def set(self, key: str, value: Any, ttl_ms: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""

        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        with self._lock:
            self._entries[key] = Entry(value=value, expires_at=self._clock() + ttl)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key`` or ``default``.

        A stale entry is removed as a side effect of the lookup.
        """

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return default
            return entry.value

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> int:
        """Remove all entries and return how many there were."""

        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def delete_matching(self, pattern: str) -> int:
        """Remove every key containing ``pattern`` and return how many went."""

        with self._lock:
            doomed = [key for key in self._entries if pattern in key]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def cleanup(self) -> int:
        """Remove all entries that have expired as of now."""

        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)
        if expired:
            logger.debug(
                {"event": "cache_cleanup", "removed": len(expired), "remaining": remaining}
            )
        return len(expired)

    def keys(self) -> List[str]:
        """Return a snapshot of stored keys, stale ones included."""

        with self._lock:
            return list(self._entries)

    # Kept on the instance so callers holding only the store can build keys.
    generate_key = staticmethod(generate_key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        marker = object()
        return self.get(key, marker) is not marker

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheStore", "Clock", "Entry", "generate_key", "monotonic_ms"]
