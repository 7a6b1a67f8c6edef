"""Periodic sweeping of expired cache entries."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Optional

from query_cache.cache.store import CacheStore
from query_cache.config.settings import DEFAULT_SWEEP_INTERVAL_MS
from query_cache.errors import SweepError, wrap_error
from query_cache.logging import get_logger, log_exception


logger = get_logger(__name__, component="sweeper")


class SweeperState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


async def run_sweeper(
    store: CacheStore,
    *,
    interval_ms: float = DEFAULT_SWEEP_INTERVAL_MS,
) -> None:
    """Run :meth:`CacheStore.cleanup` every ``interval_ms`` until cancelled.

    The first sweep runs as soon as the loop starts, not one interval later.
    A failing tick is logged and the loop carries on with the next one.
    """

    while True:
        try:
            store.cleanup()
        except asyncio.CancelledError:
            logger.info(
                "Cache sweep cancelled", extra={"event": "cache_sweep_cancelled"}
            )
            raise
        except Exception as err:
            log_exception(
                logger,
                wrap_error(
                    err,
                    SweepError,
                    message="Cache sweep iteration failed",
                    context={"interval_ms": interval_ms},
                ),
                event="cache_sweep_failed",
            )
        try:
            await asyncio.sleep(interval_ms / 1000.0)
        except asyncio.CancelledError:
            logger.info(
                "Cache sweep delay cancelled", extra={"event": "cache_sweep_cancelled"}
            )
            raise


class BackgroundSweeper:
    """Own the asyncio task that drives :func:`run_sweeper`."""

    def __init__(
        self,
        store: CacheStore,
        interval_ms: float = DEFAULT_SWEEP_INTERVAL_MS,
    ) -> None:
        self.store = store
        self.interval_ms = interval_ms
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SweeperState:
        if self._task is not None and not self._task.done():
            return SweeperState.RUNNING
        return SweeperState.STOPPED

    def start(self) -> asyncio.Task:
        """Arm the timer on the running event loop; a no-op while running."""

        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.get_running_loop().create_task(
            run_sweeper(self.store, interval_ms=self.interval_ms)
        )
        logger.info(
            {"event": "cache_sweep_started", "interval_ms": self.interval_ms}
        )
        return self._task

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""

        task = self._task
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as exc:  # pragma: no cover - best-effort shutdown
            logger.warning("Cache sweep task raised during shutdown", exc_info=exc)

    def health(self) -> tuple[bool, dict[str, Any]]:
        """Return health information for the sweep task."""

        task = self._task
        if task is None:
            return False, {"status": "stopped", "detail": "cache_sweep_not_started"}
        if task.cancelled():
            return False, {"status": "cancelled", "detail": "cache_sweep_cancelled"}
        if task.done():
            exc = task.exception()
            if exc is not None:
                return False, {
                    "status": "error",
                    "detail": f"cache_sweep_failed:{exc.__class__.__name__}",
                }
            return False, {"status": "stopped", "detail": None}
        return True, {"status": "running", "detail": None}


__all__ = ["BackgroundSweeper", "SweeperState", "run_sweeper"]
