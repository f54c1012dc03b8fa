"""Global test fixtures and utilities for sleepclock tests"""
import pytest

from sleepclock.models.schedule import Schedule
from sleepclock.services.nap_overlay import InMemoryNapStore, NapOverlay
from sleepclock.services.settings_store import InMemoryKeyValueStore, SettingsStore
from tests.helpers import FakeClock, at


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def fake_clock():
    """Clock starting at 10:00 on the base date"""
    return FakeClock(at(10, 0))


# ============================================================================
# Schedule Fixtures
# ============================================================================

@pytest.fixture
def default_schedule():
    """Bedtime 20:00, wake 07:00, 15 min quiet time, 30 min ok-to-wake, 180 min nap"""
    return Schedule()


@pytest.fixture
def short_nap_schedule():
    """Default schedule with a 10 minute nap"""
    return Schedule(nap_duration_minutes=10)


# ============================================================================
# Nap & Settings Fixtures
# ============================================================================

@pytest.fixture
def nap_store():
    """Empty in-memory nap store"""
    return InMemoryNapStore()


@pytest.fixture
def overlay(nap_store):
    """Nap overlay over the nap_store fixture"""
    return NapOverlay(nap_store)


@pytest.fixture
def kv_store():
    """Empty in-memory key-value store"""
    return InMemoryKeyValueStore()


@pytest.fixture
def settings_store(kv_store):
    """Settings store over the kv_store fixture"""
    return SettingsStore(kv_store)
