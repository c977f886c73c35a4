"""Shared fixtures for the rejection service tests."""

import pytest

from rejector.app.core.config import Settings


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_settings():
    """Build settings isolated from the environment and any .env file."""
    def _make(**overrides) -> Settings:
        values = {"performance_monitor_interval_seconds": 0}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
