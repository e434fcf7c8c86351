"""
Time Range Module - Derive anomaly and analysis windows

This module provides:
- compute_anomaly_range(max_time, granularity) -> TimeRange
- compute_analysis_range(anomaly_start, anomaly_end, granularity) -> TimeRange
- default ranges used when nothing seeds the investigation

Anomaly windows are metric-granular, analysis windows are always aligned to
day boundaries in the reference timezone.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence
import structlog

from rootcause.rca.granularity import Granularity, TimeUnit
from rootcause.rca.offsets import anomaly_offset, analysis_offset
from rootcause.rca.time_align import TimeAligner

logger = structlog.get_logger(__name__)

DEFAULT_ANOMALY_HOURS = 3
DEFAULT_ANALYSIS_DAYS = 6


@dataclass(frozen=True)
class TimeRange:
    """Closed time range in epoch millis"""
    start: int
    end: int

    @classmethod
    def from_pair(cls, pair: Sequence[Any]) -> "TimeRange":
        start, end = pair
        return cls(start=int(start), end=int(end))

    def to_list(self) -> List[int]:
        return [self.start, self.end]

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}

    @property
    def duration_millis(self) -> int:
        return self.end - self.start


class RangeComputer:
    """Compute anomaly and analysis windows in the aligner's timezone"""

    def __init__(self, aligner: TimeAligner):
        self.aligner = aligner

    def compute_anomaly_range(self, max_time: int, granularity: Granularity) -> TimeRange:
        """
        Window ending at max_time snapped to the granularity, reaching back a
        unit-dependent number of granularity steps.
        """
        end = self.aligner.snap_to_granularity(max_time, granularity)
        steps = anomaly_offset(granularity.unit) * granularity.count
        start = self.aligner.shift(end, steps, granularity.unit)
        logger.debug(
            "anomaly_range_computed",
            max_time=max_time,
            granularity=granularity.token,
            start=start,
            end=end
        )
        return TimeRange(start=start, end=end)

    def compute_analysis_range(
        self,
        anomaly_start: int,
        anomaly_end: int,
        granularity: Granularity
    ) -> TimeRange:
        """Day-aligned window around an anomaly, ending at the close of the anomaly's last day"""
        end_day = self.aligner.floor_to_unit(anomaly_end, TimeUnit.DAYS)
        end = self.aligner.shift(end_day, 1, TimeUnit.DAYS)

        start_day = self.aligner.floor_to_unit(anomaly_start, TimeUnit.DAYS)
        start = self.aligner.shift(start_day, analysis_offset(granularity.unit), TimeUnit.DAYS)

        return TimeRange(start=start, end=end)

    def default_anomaly_range(self, now: int) -> TimeRange:
        """The last 3 full hours"""
        end = self.aligner.floor_to_unit(now, TimeUnit.HOURS)
        start = self.aligner.shift(end, -DEFAULT_ANOMALY_HOURS, TimeUnit.HOURS)
        return TimeRange(start=start, end=end)

    def default_analysis_range(self, now: int) -> TimeRange:
        """The last 6 days plus today"""
        today = self.aligner.floor_to_unit(now, TimeUnit.DAYS)
        start = self.aligner.shift(today, -DEFAULT_ANALYSIS_DAYS, TimeUnit.DAYS)
        end = self.aligner.shift(today, 1, TimeUnit.DAYS)
        return TimeRange(start=start, end=end)
