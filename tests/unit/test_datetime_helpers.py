"""Unit tests for Datetime Helpers (sleepclock/utils/datetime_helpers.py)"""
import pytest
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from sleepclock import config
from sleepclock.exceptions import ValidationError
from sleepclock.utils.datetime_helpers import (
    minutes_between,
    next_occurrence,
    now_local,
    parse_time_of_day,
    shift_days,
)
from tests.helpers import at


STOCKHOLM = ZoneInfo("Europe/Stockholm")


# ============================================================================
# Parsing Tests
# ============================================================================

class TestParseTimeOfDay:
    """Test HH:mm parsing and range checks"""

    def test_parses_padded_time(self):
        """Test standard HH:mm"""
        assert parse_time_of_day("07:00") == time(7, 0)

    def test_parses_single_digit_hour(self):
        """Test H:mm is accepted"""
        assert parse_time_of_day("7:05") == time(7, 5)

    def test_accepts_time_object(self):
        """Test time objects pass through with seconds dropped"""
        assert parse_time_of_day(time(20, 30, 15)) == time(20, 30)

    def test_midnight_and_last_minute(self):
        """Test range edges"""
        assert parse_time_of_day("00:00") == time(0, 0)
        assert parse_time_of_day("23:59") == time(23, 59)

    def test_hour_out_of_range(self):
        """Test hour 24 is rejected rather than wrapped"""
        with pytest.raises(ValidationError) as exc_info:
            parse_time_of_day("24:00", field="bedtime")

        assert exc_info.value.field == "bedtime"
        assert exc_info.value.value == "24:00"

    def test_minute_out_of_range(self):
        """Test minute 60 is rejected"""
        with pytest.raises(ValidationError, match="Minute"):
            parse_time_of_day("12:60")

    @pytest.mark.parametrize("value", ["", "noon", "7", "07:0", "07-00", "07:00:00", None])
    def test_malformed_values(self, value):
        """Test malformed inputs raise ValidationError"""
        with pytest.raises(ValidationError):
            parse_time_of_day(value)


# ============================================================================
# Next Occurrence Tests
# ============================================================================

class TestNextOccurrence:
    """Test resolving a time-of-day against a reference instant"""

    def test_later_today(self):
        """Test time still ahead today resolves to today"""
        assert next_occurrence(at(10, 0), "20:00") == at(20, 0)

    def test_earlier_today_rolls_to_tomorrow(self):
        """Test time already passed resolves to tomorrow"""
        assert next_occurrence(at(10, 0), "07:00") == at(7, 0, day=1)

    def test_equal_to_reference_is_not_advanced(self):
        """Test an exact match returns the reference itself"""
        assert next_occurrence(at(20, 0), "20:00") == at(20, 0)

    def test_seconds_past_the_minute_roll_over(self):
        """Test 10:00:30 is already past 10:00"""
        assert next_occurrence(at(10, 0, 30), "10:00") == at(10, 0, day=1)

    def test_crosses_month_end(self):
        """Test day rollover at the end of a month"""
        reference = datetime(2024, 2, 29, 23, 0)
        assert next_occurrence(reference, "06:00") == datetime(2024, 3, 1, 6, 0)

    def test_always_within_next_24_hours(self):
        """Test result is never in the past and always less than a day ahead"""
        times = [f"{h:02d}:{m:02d}" for h in range(24) for m in (0, 17, 59)]
        reference = at(0, 0, 13)
        while reference < at(0, day=1):
            for tod in times:
                result = next_occurrence(reference, tod)
                assert result >= reference
                assert result - reference < timedelta(hours=24)
            reference += timedelta(minutes=53, seconds=7)

    def test_keeps_timezone(self):
        """Test aware reference gives aware result in the same zone"""
        reference = datetime(2024, 3, 5, 10, 0, tzinfo=STOCKHOLM)
        result = next_occurrence(reference, "20:00")

        assert result.tzinfo is STOCKHOLM
        assert result == datetime(2024, 3, 5, 20, 0, tzinfo=STOCKHOLM)

    def test_dst_start_keeps_wall_time(self):
        """Test rollover across the spring DST change lands on 07:00 local"""
        reference = datetime(2024, 3, 30, 8, 0, tzinfo=STOCKHOLM)
        result = next_occurrence(reference, "07:00")

        assert (result.day, result.hour, result.minute) == (31, 7, 0)
        assert result.utcoffset() == timedelta(hours=2)

    def test_invalid_time_raises(self):
        """Test malformed time is reported, not wrapped"""
        with pytest.raises(ValidationError):
            next_occurrence(at(10, 0), "25:00")


# ============================================================================
# Arithmetic Tests
# ============================================================================

class TestMinutesBetween:
    """Test floored minute differences"""

    def test_floors_partial_minutes(self):
        """Test 90m59s counts as 90"""
        assert minutes_between(at(10, 0), at(11, 30, 59)) == 90

    def test_never_negative(self):
        """Test end before start gives 0"""
        assert minutes_between(at(11, 0), at(10, 0)) == 0

    def test_counts_real_time_across_dst(self):
        """Test 01:00 -> 04:00 on the spring DST night is two real hours"""
        start = datetime(2024, 3, 31, 1, 0, tzinfo=STOCKHOLM)
        end = datetime(2024, 3, 31, 4, 0, tzinfo=STOCKHOLM)

        assert minutes_between(start, end) == 120


def test_shift_days_keeps_wall_time():
    """Test shifting by calendar days keeps hour and minute"""
    assert shift_days(at(20, 0), -2) == at(20, 0, day=-2)
    assert shift_days(at(20, 0), 1) == at(20, 0, day=1)


def test_now_local_is_aware():
    """Test now_local returns an aware datetime"""
    assert now_local().tzinfo is not None


def test_now_local_uses_configured_timezone(monkeypatch):
    """Test TIMEZONE setting is honoured"""
    monkeypatch.setattr(config, "TIMEZONE", "America/New_York")

    result = now_local()

    assert result.tzinfo == ZoneInfo("America/New_York")


def test_now_local_uses_a_named_zone(monkeypatch):
    """Test occurrences past a DST change get the new offset, not a frozen one"""
    monkeypatch.setattr(config, "TIMEZONE", "Europe/Stockholm")

    now = now_local()
    before_change = now.replace(year=2024, month=3, day=30, hour=21, minute=0, second=0, microsecond=0)
    wake = next_occurrence(before_change, "07:00")

    assert isinstance(now.tzinfo, ZoneInfo)
    assert before_change.utcoffset() == timedelta(hours=1)
    assert wake.date() == datetime(2024, 3, 31).date()
    assert wake.utcoffset() == timedelta(hours=2)
