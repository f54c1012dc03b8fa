"""
Time-of-day resolution helpers

Schedule times are wall-clock "HH:mm" values. These helpers turn them into
concrete datetimes relative to a reference instant:
- The reference's tzinfo is kept (naive in, naive out)
- Day rollover is by calendar day, so a DST change keeps the wall time
- Elapsed minutes are measured in UTC so a DST change counts real time
"""

import logging
import re
from datetime import datetime, time, timedelta, timezone
from typing import Union
from zoneinfo import ZoneInfo

from sleepclock import config
from sleepclock.exceptions import ValidationError

logger = logging.getLogger(__name__)

TIME_OF_DAY_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

TimeOfDay = Union[str, time]


def now_local() -> datetime:
    """
    Get current datetime in the configured timezone (timezone-aware)

    Returns:
        Current datetime in the named TIMEZONE, so later occurrences pick up
        that zone's DST offset
    """
    return datetime.now(ZoneInfo(config.TIMEZONE))


def parse_time_of_day(value: TimeOfDay, field: str = "time_of_day") -> time:
    """
    Parse time-of-day (HH:mm format) to time object

    Args:
        value: "HH:mm" string (e.g., "07:00", "7:00") or a time object
        field: Schedule field name, used in the error

    Returns:
        time object with seconds dropped

    Raises:
        ValidationError: If the value is not HH:mm or hour/minute is out of range
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)

    match = TIME_OF_DAY_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValidationError(
            f"Invalid time format '{value}'. Expected HH:mm",
            field=field,
            value=value
        )

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour < 24:
        raise ValidationError(f"Hour must be between 0 and 23, got {hour}", field=field, value=value)
    if not 0 <= minute < 60:
        raise ValidationError(f"Minute must be between 0 and 59, got {minute}", field=field, value=value)

    return time(hour, minute)


def next_occurrence(reference: datetime, time_of_day: TimeOfDay, field: str = "time_of_day") -> datetime:
    """
    Get the next occurrence of a time-of-day at or after a reference instant

    Args:
        reference: Instant to resolve against (naive or aware)
        time_of_day: "HH:mm" string or time object
        field: Schedule field name, used in validation errors

    Returns:
        Datetime on the reference's date at that time, or on the following
        day if that is strictly before the reference. Never before the
        reference and always less than a day after it.
    """
    tod = parse_time_of_day(time_of_day, field=field)

    occurrence = datetime.combine(reference.date(), tod, tzinfo=reference.tzinfo)
    if occurrence < reference:
        occurrence = datetime.combine(reference.date() + timedelta(days=1), tod, tzinfo=reference.tzinfo)

    return occurrence


def shift_days(dt: datetime, days: int) -> datetime:
    """Same wall-clock time `days` calendar days away"""
    return datetime.combine(dt.date() + timedelta(days=days), dt.timetz())


def minutes_between(start: datetime, end: datetime) -> int:
    """
    Whole minutes from start to end, floored, never negative

    Args:
        start: Earlier datetime
        end: Later datetime

    Returns:
        Elapsed minutes (0 if end is not after start)
    """
    if start.tzinfo is not None and end.tzinfo is not None:
        start = start.astimezone(timezone.utc)
        end = end.astimezone(timezone.utc)

    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)
