"""Cache utilities exposed under the :mod:`query_cache.cache` namespace."""

from .read_through import Producer, ReadThroughCache
from .store import CacheStore, Entry, generate_key, monotonic_ms

__all__ = [
    "CacheStore",
    "Entry",
    "Producer",
    "ReadThroughCache",
    "generate_key",
    "monotonic_ms",
]
