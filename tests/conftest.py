"""Test configuration for trialforms."""

import pytest

from trialforms.config import get_settings


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000_000.0):
        """Initialize clock."""
        self.now = start

    def __call__(self) -> float:
        """Return the current reading."""
        return self.now

    def advance(self, ms: float) -> None:
        """Move the clock forward."""
        self.now += ms


@pytest.fixture
def clock():
    """Provide a controllable clock for interaction tracking."""
    return FakeClock()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop cached settings so environment changes apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
