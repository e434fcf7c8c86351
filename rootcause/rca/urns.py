"""
URN helpers for metrics, anomaly events and detection functions.

Filtered URNs carry one ':'-separated, percent-encoded "<name><op><value>"
term per dimension value, in the order the filters were given.
"""

from typing import Iterable, List, Sequence, Tuple
from urllib.parse import quote

METRIC_PREFIX = "thirdeye:metric:"
ANOMALY_PREFIX = "thirdeye:event:anomaly:"
FUNCTION_PREFIX = "frontend:anomalyfunction:"
FRONTEND_METRIC_PREFIX = "frontend:metric:"
CURRENT_PREFIX = "frontend:metric:current:"
BASELINE_PREFIX = "frontend:metric:baseline:"

# matches JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"

Filter = Tuple[str, str, str]


def metric_urn(metric_id) -> str:
    return f"{METRIC_PREFIX}{metric_id}"


def anomaly_urn(anomaly_id) -> str:
    return f"{ANOMALY_PREFIX}{anomaly_id}"


def function_urn(function_id) -> str:
    return f"{FUNCTION_PREFIX}{function_id}"


def value_to_filter(name: str, value: str) -> Filter:
    return (name, "=", value)


def append_filters(urn: str, filters: Sequence[Filter]) -> str:
    terms = [quote(f"{name}{op}{value}", safe=_URI_COMPONENT_SAFE) for name, op, value in filters]
    return ":".join([urn] + terms)


def _metric_urn_with_prefix(prefix: str, urn: str) -> str:
    parts = urn.split(":")
    if urn.startswith(METRIC_PREFIX):
        id_index = 2
    elif urn.startswith(FRONTEND_METRIC_PREFIX):
        id_index = 3
    else:
        raise ValueError(f"Requires metric urn, but found {urn}")

    return prefix + ":".join(parts[id_index:])


def to_current_urn(urn: str) -> str:
    """Metric URN for the current time window"""
    return _metric_urn_with_prefix(CURRENT_PREFIX, urn)


def to_baseline_urn(urn: str) -> str:
    """Metric URN for the baseline time window"""
    return _metric_urn_with_prefix(BASELINE_PREFIX, urn)


def filter_prefix(urns: Iterable[str], prefix: str) -> frozenset:
    return frozenset(urn for urn in urns if urn.startswith(prefix))


class UrnSetBuilder:
    """Append-only, ordered collection of URNs finalized into a set"""

    def __init__(self, urns: Iterable[str] = ()):
        self._urns: List[str] = []
        self.extend(urns)

    def add(self, urn: str) -> "UrnSetBuilder":
        if urn not in self._urns:
            self._urns.append(urn)
        return self

    def extend(self, urns: Iterable[str]) -> "UrnSetBuilder":
        for urn in urns:
            self.add(urn)
        return self

    @property
    def ordered(self) -> Tuple[str, ...]:
        return tuple(self._urns)

    def build(self) -> frozenset:
        return frozenset(self._urns)
