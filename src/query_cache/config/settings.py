"""Runtime configuration for the query cache.

Values can be overridden via environment variables prefixed with ``QC_``.
For example, ``QC_DEFAULT_TTL_MS=60000`` shortens the default freshness
window to one minute.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_TTL_MS = 5 * 60 * 1000
DEFAULT_SWEEP_INTERVAL_MS = 10 * 60 * 1000


class CacheSettings(BaseSettings):
    """Configuration for the process-wide cache runtime."""

    default_ttl_ms: int = Field(default=DEFAULT_TTL_MS, ge=0)
    sweep_interval_ms: int = Field(default=DEFAULT_SWEEP_INTERVAL_MS, gt=0)
    deduplicate_inflight: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    class Config:
        env_prefix = "QC_"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


__all__ = ["CacheSettings", "DEFAULT_SWEEP_INTERVAL_MS", "DEFAULT_TTL_MS"]
