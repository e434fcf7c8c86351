"""
Time Alignment Module - Floor and snap epoch-millis timestamps

All alignment happens in a single reference timezone. Two processes that
resolve the same inputs must agree on the timezone to get identical output.
"""

from datetime import datetime, timedelta
from typing import Union
import pytz

from rootcause.rca.granularity import Granularity, TimeUnit

EPOCH = datetime(1970, 1, 1, tzinfo=pytz.utc)

UNIT_DELTAS = {
    TimeUnit.MILLISECONDS: timedelta(milliseconds=1),
    TimeUnit.SECONDS: timedelta(seconds=1),
    TimeUnit.MINUTES: timedelta(minutes=1),
    TimeUnit.HOURS: timedelta(hours=1),
}


def resolve_timezone(tz: Union[str, pytz.BaseTzInfo]) -> pytz.BaseTzInfo:
    """Accept a timezone name or an already-built pytz timezone"""
    return pytz.timezone(tz) if isinstance(tz, str) else tz


class TimeAligner:
    """Calendar arithmetic on epoch-millis timestamps in a fixed timezone"""

    def __init__(self, tz: Union[str, pytz.BaseTzInfo] = "UTC"):
        self.tz = resolve_timezone(tz)

    def to_datetime(self, timestamp: int) -> datetime:
        """Convert epoch millis to an aware datetime in the reference timezone"""
        seconds, millis = divmod(int(timestamp), 1000)
        return datetime.fromtimestamp(seconds, self.tz).replace(microsecond=millis * 1000)

    @staticmethod
    def to_millis(dt: datetime) -> int:
        return (dt - EPOCH) // timedelta(milliseconds=1)

    def floor_to_unit(self, timestamp: int, unit: TimeUnit) -> int:
        """Truncate a timestamp to the start of its containing unit period"""
        dt = self.to_datetime(timestamp)

        if unit == TimeUnit.DAYS:
            floored = self.tz.localize(datetime(dt.year, dt.month, dt.day))
        elif unit == TimeUnit.HOURS:
            floored = dt.replace(minute=0, second=0, microsecond=0)
        elif unit == TimeUnit.MINUTES:
            floored = dt.replace(second=0, microsecond=0)
        elif unit == TimeUnit.SECONDS:
            floored = dt.replace(microsecond=0)
        else:
            # already at millisecond precision
            return int(timestamp)

        return self.to_millis(floored)

    def shift(self, timestamp: int, amount: int, unit: TimeUnit) -> int:
        """
        Move a timestamp by a number of units.

        Days are calendar days (wall-clock time is kept across DST changes),
        smaller units are absolute durations.
        """
        if unit == TimeUnit.DAYS:
            local = self.to_datetime(timestamp).replace(tzinfo=None)
            return self.to_millis(self.tz.localize(local + timedelta(days=amount)))

        if unit not in UNIT_DELTAS:
            raise ValueError(f"Cannot shift by {unit.value} at millisecond precision")

        return int(timestamp) + amount * (UNIT_DELTAS[unit] // timedelta(milliseconds=1))

    def value_in_unit(self, timestamp: int, unit: TimeUnit) -> int:
        """Calendar field of a timestamp for the given unit"""
        dt = self.to_datetime(timestamp)
        if unit == TimeUnit.DAYS:
            # day of week, Sunday = 0
            return dt.isoweekday() % 7
        if unit == TimeUnit.HOURS:
            return dt.hour
        if unit == TimeUnit.MINUTES:
            return dt.minute
        if unit == TimeUnit.SECONDS:
            return dt.second
        return dt.microsecond // 1000

    def snap_to_granularity(self, timestamp: int, granularity: Granularity) -> int:
        """
        Floor to the granularity unit, then step back to the nearest lower
        multiple of the granularity count (e.g. :00/:15/:30/:45 for 15_MINUTES).
        """
        floored = self.floor_to_unit(timestamp, granularity.unit)
        remainder = self.value_in_unit(floored, granularity.unit) % granularity.count
        return self.shift(floored, -remainder, granularity.unit)
