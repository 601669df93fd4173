"""Shared fixtures for memory tests."""

import pytest

from lumen.memory import MemoryManager, MemoryStore

DAY = 24 * 60 * 60


class FakeClock:
    """Settable time source."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path) -> MemoryStore:
    return MemoryStore(tmp_path / "data")


@pytest.fixture
def manager(store, clock) -> MemoryManager:
    return MemoryManager(store, clock=clock)
