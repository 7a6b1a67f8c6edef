"""Configuration helpers exposed under :mod:`query_cache.config`."""

from .settings import DEFAULT_SWEEP_INTERVAL_MS, DEFAULT_TTL_MS, CacheSettings

__all__ = ["CacheSettings", "DEFAULT_SWEEP_INTERVAL_MS", "DEFAULT_TTL_MS"]
