"""
Context Loader - Fetch every record a resolution pass needs

Lookups are independent and run concurrently. Each one is guarded on its
own, so a failing or slow fetch turns into a FAILED lookup without
affecting the others. Resolution only starts after all of them settled.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar
import structlog
from pydantic import BaseModel, ValidationError

from rootcause.models.records import AnomalyRecord, MetricRecord, SessionRecord
from rootcause.rca.inputs import Lookup, ResolutionInputs, RootcauseParams
from rootcause.rca.urns import anomaly_urn, metric_urn
from rootcause.services.record_source import RecordSource

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class ContextLoader:
    """Fetch metric, anomaly and session records for a set of parameters"""

    def __init__(self, source: RecordSource, timeout: Optional[float] = None):
        self.source = source
        self.timeout = timeout

    async def _guarded(self, name: str, reference: str, fetch: Callable[[], Awaitable[Any]], parse) -> Lookup:
        """Run one fetch, converting absence and any failure into a Lookup"""
        try:
            if self.timeout is not None:
                raw = await asyncio.wait_for(fetch(), timeout=self.timeout)
            else:
                raw = await fetch()
            if raw is None:
                logger.debug("record_not_found", record=name, reference=reference)
                return Lookup.not_found()
            return Lookup.found(parse(raw))
        except Exception as e:
            logger.warning(
                "record_fetch_failed",
                record=name,
                reference=reference,
                source=self.source.get_name(),
                error=str(e)
            )
            return Lookup.failed(str(e))

    @staticmethod
    def _parser(model: Type[M]) -> Callable[[Dict[str, Any]], M]:
        return model.model_validate

    @staticmethod
    def _parse_sessions(raw: List[Dict[str, Any]]) -> List[SessionRecord]:
        """Parse linked sessions one by one; a malformed entry is dropped, not the whole list"""
        sessions = []
        for item in raw:
            try:
                sessions.append(SessionRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "linked_session_skipped",
                    session_id=item.get("id") if isinstance(item, dict) else None,
                    error_count=e.error_count()
                )
        return sessions

    def fetch_metric(self, metric_id: str) -> Awaitable[Lookup[MetricRecord]]:
        urn = metric_urn(metric_id)
        return self._guarded("metric", urn, lambda: self.source.fetch_entity(urn), self._parser(MetricRecord))

    def fetch_anomaly(self, anomaly_id: str) -> Awaitable[Lookup[AnomalyRecord]]:
        urn = anomaly_urn(anomaly_id)
        return self._guarded("anomaly", urn, lambda: self.source.fetch_entity(urn), self._parser(AnomalyRecord))

    def fetch_session(self, session_id: str) -> Awaitable[Lookup[SessionRecord]]:
        return self._guarded(
            "session",
            session_id,
            lambda: self.source.fetch_session(session_id),
            self._parser(SessionRecord)
        )

    def fetch_anomaly_sessions(self, anomaly_id: str) -> Awaitable[Lookup[List[SessionRecord]]]:
        return self._guarded(
            "anomaly_sessions",
            anomaly_id,
            lambda: self.source.query_sessions(anomaly_id),
            self._parse_sessions
        )

    async def load(self, params: RootcauseParams) -> ResolutionInputs:
        """
        Fetch all records referenced by params.

        Only lookups whose id is present are issued; the others stay
        NOT_REQUESTED.
        """
        tasks: Dict[str, Awaitable[Lookup]] = {}

        if params.metric_id:
            tasks["metric"] = self.fetch_metric(params.metric_id)

        if params.anomaly_id:
            tasks["anomaly"] = self.fetch_anomaly(params.anomaly_id)
            tasks["anomaly_sessions"] = self.fetch_anomaly_sessions(params.anomaly_id)

        if params.session_id:
            tasks["session"] = self.fetch_session(params.session_id)

        results = await asyncio.gather(*tasks.values())
        lookups = dict(zip(tasks.keys(), results))

        logger.debug(
            "records_loaded",
            **{name: lookup.status.value for name, lookup in lookups.items()}
        )
        return ResolutionInputs(**lookups)
