"""
Resolved analysis context for a root-cause investigation.

All values here are immutable snapshots produced by one resolution pass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from rootcause.rca.time_range import TimeRange
from rootcause.rca.urns import METRIC_PREFIX, filter_prefix


class SetupMode(str, Enum):
    """Which resolution branch produced the final context"""
    CONTEXT = "context"    # defaults only
    SELECTED = "selected"  # seeded from a metric or an anomaly
    NONE = "none"          # restored from a saved session


@dataclass(frozen=True)
class Context:
    """Time ranges, granularity, compare mode and entities driving the analysis view"""
    urns: FrozenSet[str]
    anomaly_range: TimeRange
    analysis_range: TimeRange
    granularity: str
    compare_mode: str
    anomaly_urns: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "urns": sorted(self.urns),
            "anomalyRange": self.anomaly_range.to_list(),
            "analysisRange": self.analysis_range.to_list(),
            "granularity": self.granularity,
            "compareMode": self.compare_mode,
            "anomalyUrns": sorted(self.anomaly_urns),
        }


@dataclass(frozen=True)
class SessionMeta:
    """Metadata of the investigation session shown alongside the context"""
    name: str
    text: str = ""
    owner: str = ""
    permissions: str = "READ_WRITE"
    updated_by: str = ""
    updated_time: Optional[int] = None
    modified: bool = True
    selected_urns: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "text": self.text,
            "owner": self.owner,
            "permissions": self.permissions,
            "updatedBy": self.updated_by,
            "updatedTime": self.updated_time,
            "modified": self.modified,
            "selectedUrns": sorted(self.selected_urns),
        }


@dataclass(frozen=True)
class RedirectInstruction:
    """The caller must rewrite its addressable state to these parameters"""
    session_id: str
    anomaly_id: Optional[str] = None

    def to_query_params(self) -> Dict[str, Optional[str]]:
        return {"sessionId": self.session_id, "anomalyId": self.anomaly_id}


@dataclass(frozen=True)
class ResolvedState:
    """Everything one resolution pass hands to the investigation screen"""
    context: Context
    session: SessionMeta
    setup_mode: SetupMode
    errors: FrozenSet[str] = frozenset()
    redirect: Optional[RedirectInstruction] = None
    metric_id: Optional[str] = None
    anomaly_id: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def size_metric_urns(self) -> FrozenSet[str]:
        """Context URNs that reference metrics"""
        return filter_prefix(self.context.urns, METRIC_PREFIX)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "context": self.context.to_dict(),
            "session": self.session.to_dict(),
            "setupMode": self.setup_mode.value,
            "errors": sorted(self.errors),
            "sizeMetricUrns": sorted(self.size_metric_urns),
            "redirect": self.redirect.to_query_params() if self.redirect else None,
            "metricId": self.metric_id,
            "anomalyId": self.anomaly_id,
            "sessionId": self.session_id,
        }
