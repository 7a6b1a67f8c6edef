"""Background tasks that keep the cache bounded."""

from __future__ import annotations

from .sweeper import BackgroundSweeper, SweeperState, run_sweeper

__all__ = ["BackgroundSweeper", "SweeperState", "run_sweeper"]
