import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from query_cache.cache import CacheStore  # noqa: E402
from query_cache.errors import reset_error_metrics  # noqa: E402


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> CacheStore:
    return CacheStore(clock=clock)


@pytest.fixture(autouse=True)
def _reset_error_metrics() -> None:
    reset_error_metrics()
