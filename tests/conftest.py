"""Root test configuration: deterministic clock and entropy for the synchronizer"""

from datetime import datetime, timedelta, timezone

import pytest

from postsync.core.pipeline import SyncOptions


START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Returns START, then advances by step on every call."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


class CountingEntropy:
    """Yields n copies of an incrementing byte, so every draw differs and is predictable."""

    def __init__(self):
        self.calls = 0

    def __call__(self, n: int) -> bytes:
        self.calls += 1
        return bytes([self.calls % 256]) * n


@pytest.fixture(name="clock")
def clock_fixture():
    return FakeClock()


@pytest.fixture(name="entropy")
def entropy_fixture():
    return CountingEntropy()


@pytest.fixture(name="options")
def options_fixture(clock, entropy):
    return SyncOptions(clock=clock, entropy=entropy)
