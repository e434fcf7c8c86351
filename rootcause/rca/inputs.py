"""
Inputs to context resolution: addressable parameters and looked-up records.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from rootcause.models.records import AnomalyRecord, MetricRecord, SessionRecord

T = TypeVar("T")


class LookupStatus(str, Enum):
    NOT_REQUESTED = "not_requested"
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """
    Outcome of fetching one record.

    Keeps "never asked for" apart from "asked for but missing" and
    "asked for but the fetch failed".
    """
    status: LookupStatus = LookupStatus.NOT_REQUESTED
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def not_requested(cls) -> "Lookup[T]":
        return cls(LookupStatus.NOT_REQUESTED)

    @classmethod
    def found(cls, value: T) -> "Lookup[T]":
        return cls(LookupStatus.FOUND, value=value)

    @classmethod
    def not_found(cls) -> "Lookup[T]":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: str) -> "Lookup[T]":
        return cls(LookupStatus.FAILED, error=error)

    @property
    def requested(self) -> bool:
        return self.status != LookupStatus.NOT_REQUESTED

    @property
    def is_found(self) -> bool:
        return self.status == LookupStatus.FOUND


@dataclass(frozen=True)
class ResolutionInputs:
    """All records one resolution pass works from, fetched ahead of time"""
    metric: Lookup[MetricRecord] = field(default_factory=Lookup)
    anomaly: Lookup[AnomalyRecord] = field(default_factory=Lookup)
    session: Lookup[SessionRecord] = field(default_factory=Lookup)
    anomaly_sessions: Lookup[List[SessionRecord]] = field(default_factory=Lookup)


@dataclass(frozen=True)
class RootcauseParams:
    """
    Addressable parameters of the investigation screen.

    Besides the three initialization sources, callers may override any of
    the default context values.
    """
    metric_id: Optional[str] = None
    anomaly_id: Optional[str] = None
    session_id: Optional[str] = None

    anomaly_range_start: Optional[int] = None
    anomaly_range_end: Optional[int] = None
    analysis_range_start: Optional[int] = None
    analysis_range_end: Optional[int] = None
    granularity: Optional[str] = None
    compare_mode: Optional[str] = None

    def redirected(self, session_id: str) -> "RootcauseParams":
        """Parameters after following a session recovery redirect"""
        return replace(self, session_id=session_id, anomaly_id=None)

    def reset_on_exit(self) -> "RootcauseParams":
        """Leaving the screen must not leave a sticky session id behind"""
        return replace(self, session_id=None)


def requires_refresh(previous: Optional[RootcauseParams], current: RootcauseParams) -> bool:
    """
    Whether a parameter change needs a fresh resolution pass.

    Metric and anomaly changes do, a session id change alone does not.
    """
    if previous is None:
        return True
    return previous.metric_id != current.metric_id or previous.anomaly_id != current.anomaly_id
