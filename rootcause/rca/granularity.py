"""
Granularity Module - Parse and normalize metric bucket granularities

Upstream metadata encodes granularity as "<count>_<UNIT>" (e.g. "5_MINUTES",
"1_HOURS"). Root-cause analysis never works below 5-minute buckets, so
normalization coarsens sub-minute units and clamps minute counts.
"""

from dataclasses import dataclass
from enum import Enum
import structlog

from rootcause.utils.errors import MalformedGranularityError

logger = structlog.get_logger(__name__)


class TimeUnit(str, Enum):
    """Time units as they appear in upstream granularity tokens"""
    NANOSECONDS = "NANOSECONDS"
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"


SUB_MINUTE_UNITS = frozenset([TimeUnit.NANOSECONDS, TimeUnit.MILLISECONDS, TimeUnit.SECONDS])

MIN_MINUTE_COUNT = 5


@dataclass(frozen=True)
class Granularity:
    """Bucket size of a metric time series"""
    count: int
    unit: TimeUnit

    @classmethod
    def parse(cls, token: str) -> "Granularity":
        """
        Parse a raw "<count>_<UNIT>" token.

        Raises:
            MalformedGranularityError: if the token does not have that shape
        """
        if not isinstance(token, str):
            raise MalformedGranularityError(token)

        count_str, sep, unit_str = token.partition("_")
        if not sep:
            raise MalformedGranularityError(token)

        try:
            count = int(count_str)
            unit = TimeUnit(unit_str)
        except ValueError as e:
            raise MalformedGranularityError(token) from e

        if count <= 0:
            raise MalformedGranularityError(token)

        return cls(count=count, unit=unit)

    @property
    def token(self) -> str:
        return f"{self.count}_{self.unit.value}"

    def normalized(self) -> "Granularity":
        """Coarsen to a granularity RCA can work with (>= 5 minutes)"""
        if self.unit in SUB_MINUTE_UNITS:
            return Granularity(MIN_MINUTE_COUNT, TimeUnit.MINUTES)
        if self.unit == TimeUnit.MINUTES:
            return Granularity(max(self.count, MIN_MINUTE_COUNT), TimeUnit.MINUTES)
        return self

    def __str__(self) -> str:
        return self.token


DEFAULT_GRANULARITY = Granularity(1, TimeUnit.HOURS)
DAILY_GRANULARITY = Granularity(1, TimeUnit.DAYS)


def normalize_granularity(token: str) -> Granularity:
    """Parse and normalize a raw granularity token"""
    raw = Granularity.parse(token)
    normalized = raw.normalized()
    if normalized != raw:
        logger.debug("granularity_normalized", raw=token, normalized=normalized.token)
    return normalized


def adjust_granularity(token: str) -> str:
    """Normalize a raw granularity token and re-encode it in the same format"""
    return normalize_granularity(token).token
