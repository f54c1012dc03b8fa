"""Pydantic models for the bedtime/wake schedule and its evaluation"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


class Phase(str, Enum):
    """Display phase. Declaration order is the tie-break order for coinciding boundaries."""

    SLEEP = "sleep"
    QUIET_TIME = "quietTime"
    OK_TO_WAKE = "okToWake"
    IDLE = "idle"

    @property
    def order(self) -> int:
        return list(Phase).index(self)


class Schedule(BaseModel):
    """Daily schedule, read fresh on every evaluation"""

    model_config = ConfigDict(frozen=True)

    bedtime: str = "20:00"  # HH:mm
    wake_time: str = "07:00"  # HH:mm
    quiet_time_minutes: int = Field(default=15, ge=0, le=1440)  # before wake_time, 0 disables
    ok_to_wake_duration: int = Field(default=30, ge=0, le=1440)  # after wake_time
    nap_duration_minutes: int = Field(default=180, ge=0, le=1440)


class NapState(BaseModel):
    """Nap overlay state; start_time and end_time are set iff the nap is active"""

    model_config = ConfigDict(frozen=True)

    active: bool = False
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @model_validator(mode='after')
    def times_match_active(self) -> 'NapState':
        if self.active and (self.start_time is None or self.end_time is None):
            raise ValueError("An active nap needs a start_time and an end_time")
        if not self.active and (self.start_time is not None or self.end_time is not None):
            raise ValueError("An inactive nap cannot have a start_time or end_time")
        if self.active and self.end_time < self.start_time:
            raise ValueError("A nap cannot end before it starts")
        return self

    @property
    def duration(self) -> Optional[timedelta]:
        """Length of the running nap, fixed when it started"""
        if not self.active:
            return None
        return self.end_time - self.start_time

    @classmethod
    def inactive(cls) -> 'NapState':
        return cls()

    @classmethod
    def until(cls, end_time: datetime, start_time: datetime) -> 'NapState':
        return cls(active=True, start_time=start_time, end_time=end_time)


class PhaseEvent(BaseModel):
    """A phase boundary: `phase` starts at `time`"""

    model_config = ConfigDict(frozen=True)

    phase: Phase
    time: datetime


class EvaluationResult(BaseModel):
    """Derived display state for one instant. Never persisted."""

    model_config = ConfigDict(frozen=True)

    current_phase: Phase
    next_phase: Phase
    next_event_time: datetime
    minutes_until_next_event: int = Field(ge=0)
    nap_active: bool = False
