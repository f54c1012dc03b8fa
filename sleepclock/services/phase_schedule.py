"""
Phase schedule calculator

Maps an instant and a Schedule to the current phase and the next transition.
One cycle starts at a bedtime occurrence and runs through the wake that
follows it:

    bedtime -> Sleep
    wake - quiet_time_minutes -> QuietTime   (omitted when quiet time is 0)
    wake -> OkToWake
    wake + ok_to_wake_duration -> Idle

Evaluation lays several consecutive cycles on one timeline so that an instant
before today's first boundary resolves against the previous night, and the
next event after tonight's last boundary is tomorrow's bedtime.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Tuple

from sleepclock.models.schedule import EvaluationResult, Phase, PhaseEvent, Schedule
from sleepclock.utils.datetime_helpers import minutes_between, next_occurrence, shift_days

logger = logging.getLogger(__name__)

# Cycles laid on the timeline, in days relative to the next bedtime
CYCLE_OFFSETS: Tuple[int, ...] = (-2, -1, 0, 1)


def _cycle_from_bedtime(bedtime: datetime, schedule: Schedule) -> List[PhaseEvent]:
    """Boundaries of the cycle starting at a concrete bedtime, in declaration order"""
    wake = next_occurrence(bedtime, schedule.wake_time, field="wake_time")

    events = [PhaseEvent(phase=Phase.SLEEP, time=bedtime)]
    if schedule.quiet_time_minutes > 0:
        events.append(PhaseEvent(
            phase=Phase.QUIET_TIME,
            time=wake - timedelta(minutes=schedule.quiet_time_minutes)
        ))
    events.append(PhaseEvent(phase=Phase.OK_TO_WAKE, time=wake))
    events.append(PhaseEvent(
        phase=Phase.IDLE,
        time=wake + timedelta(minutes=schedule.ok_to_wake_duration)
    ))
    return events


def day_cycle_events(anchor: datetime, schedule: Schedule) -> List[PhaseEvent]:
    """
    Ordered boundaries of the next cycle, starting at the next bedtime

    Args:
        anchor: Reference instant
        schedule: Schedule to resolve

    Returns:
        Boundaries sorted by time, coinciding ones in phase declaration order

    Raises:
        ValidationError: If bedtime or wake_time is malformed
    """
    bedtime = next_occurrence(anchor, schedule.bedtime, field="bedtime")
    events = _cycle_from_bedtime(bedtime, schedule)
    return sorted(events, key=lambda event: (event.time, event.phase.order))


def timeline(now: datetime, schedule: Schedule) -> List[PhaseEvent]:
    """Boundaries of the cycles around `now`, ordered by time, then cycle, then phase"""
    next_bedtime = next_occurrence(now, schedule.bedtime, field="bedtime")

    keyed = []
    for cycle, offset in enumerate(CYCLE_OFFSETS):
        for event in _cycle_from_bedtime(shift_days(next_bedtime, offset), schedule):
            keyed.append(((event.time, cycle, event.phase.order), event))

    keyed.sort(key=lambda item: item[0])
    return [event for _, event in keyed]


def evaluate(now: datetime, schedule: Schedule) -> EvaluationResult:
    """
    Evaluate the regular daily schedule at an instant (ignores naps)

    Args:
        now: Instant to evaluate
        schedule: Current schedule

    Returns:
        EvaluationResult with the phase whose boundary is the latest one at or
        before `now` and the first boundary strictly after it

    Raises:
        ValidationError: If bedtime or wake_time is malformed
    """
    events = timeline(now, schedule)

    current = None
    upcoming = None
    for event in events:
        if event.time <= now:
            current = event
        else:
            upcoming = event
            break

    # Both always exist: the earliest cycle starts two days before the next
    # bedtime and the last one a day after it.
    result = EvaluationResult(
        current_phase=current.phase,
        next_phase=upcoming.phase,
        next_event_time=upcoming.time,
        minutes_until_next_event=minutes_between(now, upcoming.time),
    )
    logger.debug(
        f"Schedule at {now.isoformat()}: {result.current_phase.value} -> "
        f"{result.next_phase.value} at {result.next_event_time.isoformat()}"
    )
    return result
