"""
Context Resolver - Build the analysis context of a root-cause investigation

The context can be seeded from a metric, an anomaly or a saved session.
Branches are applied in a fixed order, each one replacing the whole result
of the previous when its record resolved:

1. Defaults (last 3 hours, last week, 1_HOURS, WoW)
2. Metric: windows anchored at the metric's latest data point
3. Anomaly: the anomaly's own window, filtered by its dimensions
4. Session: the saved context, verbatim

Before any branch runs, an anomaly that already has saved sessions is
redirected to the most recently updated one.
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple
import structlog

from rootcause.models.records import AnomalyRecord, MetricRecord, SessionRecord
from rootcause.rca.context import (
    Context,
    RedirectInstruction,
    ResolvedState,
    SessionMeta,
    SetupMode,
)
from rootcause.rca.granularity import (
    DAILY_GRANULARITY,
    DEFAULT_GRANULARITY,
    normalize_granularity,
)
from rootcause.rca.inputs import Lookup, ResolutionInputs, RootcauseParams
from rootcause.rca.time_align import TimeAligner
from rootcause.rca.time_range import RangeComputer, TimeRange
from rootcause.rca.urns import (
    UrnSetBuilder,
    anomaly_urn,
    append_filters,
    function_urn,
    metric_urn,
    to_baseline_urn,
    to_current_urn,
    value_to_filter,
)
from rootcause.utils.errors import reference_not_found

logger = structlog.get_logger(__name__)

DEFAULT_COMPARE_MODE = "WoW"
DEFAULT_PERMISSIONS = "READ_WRITE"


@dataclass(frozen=True)
class Resolution:
    """Intermediate result carried from one branch to the next"""
    context: Context
    session: SessionMeta
    setup_mode: SetupMode


@dataclass(frozen=True)
class BranchOutcome:
    replacement: Optional[Resolution] = None
    error: Optional[str] = None


def pick_latest_session(sessions: Sequence[SessionRecord]) -> SessionRecord:
    """Most recently updated session; on ties the later one in input order wins"""
    return sorted(sessions, key=lambda s: s.updated)[-1]


class ContextResolver:
    """Resolve parameters and pre-fetched records into a ResolvedState"""

    def __init__(
        self,
        tz: str = "UTC",
        default_compare_mode: str = DEFAULT_COMPARE_MODE,
        default_permissions: str = DEFAULT_PERMISSIONS,
        report_missing_metric: bool = False
    ):
        self.aligner = TimeAligner(tz)
        self.ranges = RangeComputer(self.aligner)
        self.default_compare_mode = default_compare_mode
        self.default_permissions = default_permissions
        self.report_missing_metric = report_missing_metric

    @classmethod
    def from_settings(cls, settings) -> "ContextResolver":
        return cls(
            tz=settings.timezone,
            default_compare_mode=settings.default_compare_mode,
            default_permissions=settings.default_permissions,
            report_missing_metric=settings.report_missing_metric,
        )

    def format_time(self, timestamp: int) -> str:
        """Render a timestamp as e.g. 'Mon, Oct 19 2026, 3:05 pm UTC'"""
        dt = self.aligner.to_datetime(timestamp)
        hour = dt.hour % 12 or 12
        meridiem = "am" if dt.hour < 12 else "pm"
        return f"{dt:%a, %b} {dt.day} {dt:%Y}, {hour}:{dt:%M} {meridiem} {dt:%Z}"

    # ------------------------------------------------------------------
    # Session recovery
    # ------------------------------------------------------------------

    def recover_session(
        self,
        params: RootcauseParams,
        inputs: ResolutionInputs
    ) -> Tuple[RootcauseParams, ResolutionInputs, Optional[RedirectInstruction]]:
        """
        Swap an anomaly request for its latest saved session, if it has any.

        Returns the rewritten parameters and inputs, plus the redirect the
        caller has to apply to its addressable state.
        """
        sessions = inputs.anomaly_sessions.value if inputs.anomaly_sessions.is_found else None
        if not params.anomaly_id or not sessions:
            return params, inputs, None

        latest = pick_latest_session(sessions)
        logger.info(
            "session_recovered_for_anomaly",
            anomaly_id=params.anomaly_id,
            session_id=latest.id,
            candidates=len(sessions)
        )

        recovered_inputs = replace(
            inputs,
            anomaly=Lookup.not_requested(),
            session=Lookup.found(latest),
        )
        return params.redirected(latest.id), recovered_inputs, RedirectInstruction(session_id=latest.id)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def default_resolution(self, params: RootcauseParams, now: int, owner: str = "") -> Resolution:
        """Blank investigation, honoring any explicit overrides in params"""
        anomaly_default = self.ranges.default_anomaly_range(now)
        analysis_default = self.ranges.default_analysis_range(now)

        anomaly_range = TimeRange(
            start=_first_set(params.anomaly_range_start, anomaly_default.start),
            end=_first_set(params.anomaly_range_end, anomaly_default.end),
        )
        analysis_range = TimeRange(
            start=_first_set(params.analysis_range_start, analysis_default.start),
            end=_first_set(params.analysis_range_end, analysis_default.end),
        )

        context = Context(
            urns=frozenset(),
            anomaly_range=anomaly_range,
            analysis_range=analysis_range,
            granularity=params.granularity or DEFAULT_GRANULARITY.token,
            compare_mode=params.compare_mode or self.default_compare_mode,
            anomaly_urns=frozenset(),
        )
        session = SessionMeta(
            name=f"New Investigation ({self.format_time(now)})",
            owner=owner or "",
            permissions=self.default_permissions,
        )
        return Resolution(context=context, session=session, setup_mode=SetupMode.CONTEXT)

    def metric_resolution(self, current: Resolution, metric_id: str, metric: MetricRecord) -> Resolution:
        """Windows anchored at the latest complete bucket of the metric"""
        granularity = normalize_granularity(metric.granularity)
        max_time = self.aligner.snap_to_granularity(metric.max_time, granularity)

        anomaly_range = self.ranges.compute_anomaly_range(max_time, granularity)
        # analysis window is anchored at the anomaly end only
        analysis_range = self.ranges.compute_analysis_range(anomaly_range.end, anomaly_range.end, granularity)

        # daily metrics are still explored hourly
        emitted = DEFAULT_GRANULARITY if granularity == DAILY_GRANULARITY else granularity

        urn = metric_urn(metric_id)
        context = Context(
            urns=frozenset([urn]),
            anomaly_range=anomaly_range,
            analysis_range=analysis_range,
            granularity=emitted.token,
            compare_mode=current.context.compare_mode,
            anomaly_urns=frozenset(),
        )
        selected = UrnSetBuilder([urn, to_current_urn(urn), to_baseline_urn(urn)]).build()
        return Resolution(
            context=context,
            session=replace(current.session, selected_urns=selected),
            setup_mode=SetupMode.SELECTED,
        )

    def anomaly_resolution(
        self,
        current: Resolution,
        anomaly_id: str,
        anomaly: AnomalyRecord,
        now: int
    ) -> Resolution:
        """The anomaly's own window, with its metric filtered to the affected dimensions"""
        granularity = normalize_granularity(anomaly.metric_granularity)
        anomaly_range = TimeRange(start=anomaly.start, end=anomaly.end)
        analysis_range = self.ranges.compute_analysis_range(anomaly.start, anomaly.end, granularity)

        filters = [
            value_to_filter(name, value)
            for name in anomaly.dimension_names
            for value in anomaly.values(name)
        ]

        event_urn = anomaly_urn(anomaly_id)
        anomaly_metric_urn = append_filters(metric_urn(anomaly.metric_id), filters)

        anomaly_urns = UrnSetBuilder([event_urn, anomaly_metric_urn])
        if anomaly.function_id:
            anomaly_urns.add(append_filters(function_urn(anomaly.function_id), filters))

        context = Context(
            urns=frozenset([anomaly_metric_urn]),
            anomaly_range=anomaly_range,
            analysis_range=analysis_range,
            granularity=granularity.token,
            compare_mode=self.default_compare_mode,
            anomaly_urns=anomaly_urns.build(),
        )
        session = replace(
            current.session,
            name=f"New Investigation of #{anomaly_id} ({self.format_time(now)})",
            text=anomaly.comment,
            selected_urns=UrnSetBuilder([event_urn, anomaly_metric_urn]).build(),
        )
        return Resolution(context=context, session=session, setup_mode=SetupMode.SELECTED)

    def session_resolution(self, session: SessionRecord) -> Resolution:
        """Saved session restored verbatim"""
        context = Context(
            urns=frozenset(session.context_urns),
            anomaly_range=TimeRange(start=session.anomaly_range_start, end=session.anomaly_range_end),
            analysis_range=TimeRange(start=session.analysis_range_start, end=session.analysis_range_end),
            granularity=session.granularity,
            compare_mode=session.compare_mode,
            anomaly_urns=frozenset(session.anomaly_urns or []),
        )
        meta = SessionMeta(
            name=session.name,
            text=session.text,
            owner=session.owner,
            permissions=session.permissions,
            updated_by=session.updated_by,
            updated_time=session.updated,
            modified=False,
            selected_urns=frozenset(session.selected_urns),
        )
        return Resolution(context=context, session=meta, setup_mode=SetupMode.NONE)

    # ------------------------------------------------------------------
    # Branch triggers
    # ------------------------------------------------------------------

    def _metric_branch(self, current, params, inputs, now) -> BranchOutcome:
        if not params.metric_id:
            return BranchOutcome()
        if not inputs.metric.is_found or inputs.metric.value.max_time is None:
            logger.debug("metric_branch_skipped", metric_id=params.metric_id, status=inputs.metric.status.value)
            if self.report_missing_metric:
                return BranchOutcome(error=reference_not_found("metricId", params.metric_id))
            return BranchOutcome()
        return BranchOutcome(replacement=self.metric_resolution(current, params.metric_id, inputs.metric.value))

    def _anomaly_branch(self, current, params, inputs, now) -> BranchOutcome:
        if not params.anomaly_id:
            return BranchOutcome()
        if not inputs.anomaly.is_found or not inputs.anomaly.value.metric_id:
            # an anomaly without its metric cannot seed a context
            logger.warning("anomaly_not_found", anomaly_id=params.anomaly_id, status=inputs.anomaly.status.value)
            return BranchOutcome(error=reference_not_found("anomalyId", params.anomaly_id))
        return BranchOutcome(
            replacement=self.anomaly_resolution(current, params.anomaly_id, inputs.anomaly.value, now)
        )

    def _session_branch(self, current, params, inputs, now) -> BranchOutcome:
        if not params.session_id:
            return BranchOutcome()
        if not inputs.session.is_found:
            logger.warning("session_not_found", session_id=params.session_id, status=inputs.session.status.value)
            return BranchOutcome(error=reference_not_found("sessionId", params.session_id))
        return BranchOutcome(replacement=self.session_resolution(inputs.session.value))

    @property
    def branches(self) -> List[Callable[..., BranchOutcome]]:
        return [self._metric_branch, self._anomaly_branch, self._session_branch]

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def resolve(
        self,
        params: RootcauseParams,
        inputs: ResolutionInputs,
        now: int,
        owner: str = ""
    ) -> ResolvedState:
        """
        Resolve the investigation context.

        Args:
            params: Addressable parameters of the screen
            inputs: Records fetched for those parameters
            now: Current time in epoch millis
            owner: Name of the user opening the investigation

        Returns:
            ResolvedState; lookup problems are reported in its errors, never raised
        """
        params, inputs, redirect = self.recover_session(params, inputs)

        resolution = self.default_resolution(params, now, owner)
        errors: List[str] = []

        for branch in self.branches:
            outcome = branch(resolution, params, inputs, now)
            if outcome.error:
                errors.append(outcome.error)
            if outcome.replacement is not None:
                resolution = outcome.replacement

        state = ResolvedState(
            context=resolution.context,
            session=resolution.session,
            setup_mode=resolution.setup_mode,
            errors=frozenset(errors),
            redirect=redirect,
            metric_id=params.metric_id,
            anomaly_id=params.anomaly_id,
            session_id=params.session_id,
        )
        logger.info(
            "context_resolved",
            setup_mode=state.setup_mode.value,
            granularity=state.context.granularity,
            urns=len(state.context.urns),
            errors=len(state.errors),
            redirect=redirect is not None
        )
        return state


def _first_set(value: Optional[int], default: int) -> int:
    return default if value is None else int(value)
