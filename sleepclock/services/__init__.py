"""
Service Layer Package

Schedule logic behind the clock display:
- phase_schedule: regular daily cycle (pure functions)
- nap_overlay: nap state and the nap cycle layered over the daily one
- settings_store: settings load/update/reset over a key-value store
"""

from sleepclock.services.phase_schedule import day_cycle_events, evaluate
from sleepclock.services.nap_overlay import InMemoryNapStore, NapOverlay, NapStore, evaluate_with_nap
from sleepclock.services.settings_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    SettingsStore,
)

__all__ = [
    # Daily cycle
    "day_cycle_events",
    "evaluate",
    # Nap overlay
    "InMemoryNapStore",
    "NapOverlay",
    "NapStore",
    "evaluate_with_nap",
    # Settings
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "SettingsStore",
]
