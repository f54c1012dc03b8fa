"""
Nap overlay

A nap temporarily replaces the daily cycle with a short one of its own:

    start -> Sleep
    end - quiet_time_minutes -> QuietTime   (only if 0 < quiet time < nap length)
    end -> OkToWake
    end + 1 minute -> nap clears itself, regular schedule resumes

Naps may only start while the regular schedule is Idle, and must end no
later than the next bedtime.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Optional, Protocol

from sleepclock.exceptions import (
    InvalidStateError,
    NAP_ALREADY_ACTIVE,
    NAP_NOT_ACTIVE,
    NAP_OVERLAPS_BEDTIME,
    NOT_IDLE,
)
from sleepclock.models.schedule import EvaluationResult, NapState, Phase, Schedule
from sleepclock.services import phase_schedule
from sleepclock.utils.datetime_helpers import minutes_between, next_occurrence

logger = logging.getLogger(__name__)

# How long a finished nap keeps showing OkToWake before it clears itself
NAP_EXPIRY_GRACE = timedelta(minutes=1)


class NapStore(Protocol):
    """Holder of the single NapState"""

    def get(self) -> NapState:
        ...

    def set(self, state: NapState) -> None:
        ...


class InMemoryNapStore:
    """NapStore kept in process memory"""

    def __init__(self, state: NapState = None):
        self._state = state or NapState.inactive()

    def get(self) -> NapState:
        return self._state

    def set(self, state: NapState) -> None:
        self._state = state


def is_expired(now: datetime, nap_state: NapState) -> bool:
    """True once an active nap is a full grace period past its end"""
    return nap_state.active and now >= nap_state.end_time + NAP_EXPIRY_GRACE


def evaluate_with_nap(now: datetime, schedule: Schedule, nap_state: NapState) -> EvaluationResult:
    """
    Evaluate the display state with the nap overlay applied

    Pure: an expired nap is reported as inactive here, but clearing it from
    the store is left to NapOverlay.

    Args:
        now: Instant to evaluate
        schedule: Current schedule (quiet time is read from it)
        nap_state: Current nap state; its start and end fix the nap length

    Returns:
        EvaluationResult, with nap_active set when the nap cycle applies
    """
    if not nap_state.active or is_expired(now, nap_state):
        return phase_schedule.evaluate(now, schedule)

    nap_end = nap_state.end_time
    quiet_minutes = schedule.quiet_time_minutes
    quiet_time = timedelta(minutes=quiet_minutes)
    has_quiet_time = timedelta(0) < quiet_time < nap_state.duration
    quiet_start = nap_end - quiet_time

    if has_quiet_time and now < quiet_start:
        current = Phase.SLEEP
        upcoming, upcoming_time = Phase.QUIET_TIME, quiet_start
    elif now < nap_end:
        current = Phase.QUIET_TIME if has_quiet_time else Phase.SLEEP
        upcoming, upcoming_time = Phase.OK_TO_WAKE, nap_end
    else:
        current = Phase.OK_TO_WAKE
        upcoming_time = nap_end + NAP_EXPIRY_GRACE
        upcoming = phase_schedule.evaluate(upcoming_time, schedule).current_phase

    return EvaluationResult(
        current_phase=current,
        next_phase=upcoming,
        next_event_time=upcoming_time,
        minutes_until_next_event=minutes_between(now, upcoming_time),
        nap_active=True,
    )


class NapOverlay:
    """
    Owns the nap state and enforces the nap rules

    Every read-modify-write of the store happens under one lock so that
    start, cancel and auto-expiry never interleave.
    """

    def __init__(self, nap_store: NapStore = None):
        self.nap_store = nap_store or InMemoryNapStore()
        self._lock = threading.RLock()

    @property
    def is_active(self) -> bool:
        return self.nap_store.get().active

    @property
    def end_time(self):
        return self.nap_store.get().end_time

    def start_nap(self, now: datetime, schedule: Schedule) -> datetime:
        """
        Start a nap of schedule.nap_duration_minutes

        Args:
            now: Current instant
            schedule: Current schedule

        Returns:
            When the nap ends

        Raises:
            InvalidStateError: If a nap is already active, the regular
                schedule is not Idle, or the nap would end after the next
                bedtime. The nap state is left unchanged.
        """
        with self._lock:
            nap_state = self.nap_store.get()
            if nap_state.active and not is_expired(now, nap_state):
                raise InvalidStateError(NAP_ALREADY_ACTIVE, operation="start_nap")

            regular = phase_schedule.evaluate(now, schedule)
            if regular.current_phase != Phase.IDLE:
                raise InvalidStateError(
                    NOT_IDLE,
                    operation="start_nap",
                    context={"current_phase": regular.current_phase.value}
                )

            nap_end = now + timedelta(minutes=schedule.nap_duration_minutes)
            next_bedtime = next_occurrence(now, schedule.bedtime, field="bedtime")
            if nap_end > next_bedtime:
                raise InvalidStateError(
                    NAP_OVERLAPS_BEDTIME,
                    operation="start_nap",
                    context={"nap_end": nap_end.isoformat(), "bedtime": next_bedtime.isoformat()}
                )

            self.nap_store.set(NapState.until(nap_end, start_time=now))

        logger.info(f"Nap started at {now.isoformat()}, ends at {nap_end.isoformat()}")
        return nap_end

    def is_active_at(self, now: datetime) -> bool:
        """Whether a nap is running at `now`, clearing it first if it has expired"""
        with self._lock:
            return self._expire(now).active

    def cancel_nap(self, now: Optional[datetime] = None) -> None:
        """
        Cancel the active nap; the regular schedule applies from the next evaluation

        Args:
            now: Current instant; a nap already past its expiry is not cancellable

        Raises:
            InvalidStateError: If no nap is active
        """
        with self._lock:
            nap_state = self._expire(now) if now is not None else self.nap_store.get()
            if not nap_state.active:
                raise InvalidStateError(NAP_NOT_ACTIVE, operation="cancel_nap")
            self.nap_store.set(NapState.inactive())

        logger.info("Nap cancelled")

    def evaluate(self, now: datetime, schedule: Schedule) -> EvaluationResult:
        """Evaluate with the overlay, clearing the nap if it has expired"""
        with self._lock:
            nap_state = self._expire(now)
        return evaluate_with_nap(now, schedule, nap_state)

    def _expire(self, now: datetime) -> NapState:
        nap_state = self.nap_store.get()
        if is_expired(now, nap_state):
            logger.info(f"Nap that ended at {nap_state.end_time.isoformat()} expired")
            nap_state = NapState.inactive()
            self.nap_store.set(nap_state)
        return nap_state
