"""
Tests for the time alignment module.

Tests cover:
- Flooring to minute, hour and day boundaries
- Snapping to multiples of the granularity count
- Calendar-day shifts across DST changes
"""

from datetime import datetime

import pytest
import pytz

from rootcause.rca.granularity import Granularity, TimeUnit
from rootcause.rca.time_align import TimeAligner


def ms(*args) -> int:
    return TimeAligner.to_millis(datetime(*args, tzinfo=pytz.utc))


# Wednesday
T = ms(2026, 1, 21, 10, 37, 42, 123000)


@pytest.fixture
def aligner():
    return TimeAligner("UTC")


class TestConversions:
    """Test millis <-> datetime conversion"""

    def test_round_trip_keeps_milliseconds(self, aligner):
        assert aligner.to_millis(aligner.to_datetime(T)) == T

    def test_to_datetime_uses_reference_timezone(self):
        aligner = TimeAligner("America/Los_Angeles")
        dt = aligner.to_datetime(ms(2026, 1, 21, 10, 0))

        assert dt.hour == 2
        assert dt.utcoffset().total_seconds() == -8 * 3600


class TestFloorToUnit:
    """Test floor_to_unit"""

    def test_floor_to_minute(self, aligner):
        assert aligner.floor_to_unit(T, TimeUnit.MINUTES) == ms(2026, 1, 21, 10, 37)

    def test_floor_to_hour(self, aligner):
        assert aligner.floor_to_unit(T, TimeUnit.HOURS) == ms(2026, 1, 21, 10, 0)

    def test_floor_to_day(self, aligner):
        assert aligner.floor_to_unit(T, TimeUnit.DAYS) == ms(2026, 1, 21)

    def test_floor_to_second(self, aligner):
        assert aligner.floor_to_unit(T, TimeUnit.SECONDS) == ms(2026, 1, 21, 10, 37, 42)

    def test_floor_is_idempotent(self, aligner):
        floored = aligner.floor_to_unit(T, TimeUnit.HOURS)
        assert aligner.floor_to_unit(floored, TimeUnit.HOURS) == floored

    def test_floor_to_day_in_local_timezone(self):
        """05:00 UTC is still the previous day in Los Angeles"""
        aligner = TimeAligner("America/Los_Angeles")

        floored = aligner.floor_to_unit(ms(2026, 1, 21, 5, 0), TimeUnit.DAYS)

        assert floored == ms(2026, 1, 20, 8, 0)


class TestSnapToGranularity:
    """Test snap_to_granularity"""

    @pytest.mark.parametrize("count,expected_minute", [(1, 37), (5, 35), (15, 30), (30, 30), (60, 0)])
    def test_minutes_snap_to_multiples(self, aligner, count, expected_minute):
        snapped = aligner.snap_to_granularity(T, Granularity(count, TimeUnit.MINUTES))
        assert snapped == ms(2026, 1, 21, 10, expected_minute)

    def test_hours_snap_to_multiples_of_hour_of_day(self, aligner):
        assert aligner.snap_to_granularity(T, Granularity(6, TimeUnit.HOURS)) == ms(2026, 1, 21, 6, 0)
        assert aligner.snap_to_granularity(T, Granularity(1, TimeUnit.HOURS)) == ms(2026, 1, 21, 10, 0)

    def test_single_day_snaps_to_midnight(self, aligner):
        assert aligner.snap_to_granularity(T, Granularity(1, TimeUnit.DAYS)) == ms(2026, 1, 21)

    def test_multi_day_snaps_on_day_of_week(self, aligner):
        """Day counts step back from Sunday; the 21st is a Wednesday"""
        assert aligner.snap_to_granularity(T, Granularity(7, TimeUnit.DAYS)) == ms(2026, 1, 18)

    def test_aligned_timestamp_is_unchanged(self, aligner):
        aligned = ms(2026, 1, 21, 10, 45)
        assert aligner.snap_to_granularity(aligned, Granularity(15, TimeUnit.MINUTES)) == aligned


class TestShift:
    """Test shift"""

    def test_shift_minutes_and_hours(self, aligner):
        assert aligner.shift(ms(2026, 1, 21, 10, 0), -90, TimeUnit.MINUTES) == ms(2026, 1, 21, 8, 30)
        assert aligner.shift(ms(2026, 1, 21, 10, 0), 3, TimeUnit.HOURS) == ms(2026, 1, 21, 13, 0)

    def test_shift_days_crosses_month(self, aligner):
        assert aligner.shift(ms(2026, 1, 31), 1, TimeUnit.DAYS) == ms(2026, 2, 1)

    def test_day_shift_keeps_wall_clock_across_dst(self):
        """The day DST starts in Los Angeles only has 23 hours"""
        aligner = TimeAligner("America/Los_Angeles")
        midnight = ms(2026, 3, 8, 8, 0)

        next_midnight = aligner.shift(midnight, 1, TimeUnit.DAYS)

        assert next_midnight == ms(2026, 3, 9, 7, 0)
        assert next_midnight - midnight == 23 * 3600 * 1000

    def test_nanosecond_shift_is_rejected(self, aligner):
        with pytest.raises(ValueError):
            aligner.shift(T, 1, TimeUnit.NANOSECONDS)
