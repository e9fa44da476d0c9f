import pytest

from goldcast.utils.cache_manager import TTLCache
from tests.mocks.fakes import ManualClock


@pytest.fixture
def clock():
    """Hand-advanced monotonic clock."""
    return ManualClock()


@pytest.fixture
def last_good(clock):
    return TTLCache("last_good_series", clock=clock)
