"""Shared time helpers for sleepclock tests"""
from datetime import datetime, timedelta

BASE_DATE = datetime(2024, 3, 5)


def at(hour: int, minute: int = 0, second: int = 0, day: int = 0) -> datetime:
    """Naive instant `day` days after 2024-03-05 at hour:minute:second"""
    return BASE_DATE + timedelta(days=day, hours=hour, minutes=minute, seconds=second)


class FakeClock:
    """Settable clock for driving ClockDriver in tests"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> datetime:
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)
        return self.now
