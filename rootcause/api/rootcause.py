"""
Root-cause context API endpoints
Resolves the investigation context when a user enters the analysis screen.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from prometheus_client import Counter
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
import structlog

from rootcause.rca.granularity import Granularity
from rootcause.rca.inputs import RootcauseParams
from rootcause.services.rootcause_service import RootcauseService
from rootcause.utils.errors import ErrorCode, MalformedGranularityError, raise_validation_error

router = APIRouter()
logger = structlog.get_logger(__name__)

resolution_count = Counter(
    'rootcause_resolutions_total',
    'Context resolutions by setup mode',
    ['setup_mode']
)
resolution_error_count = Counter(
    'rootcause_resolution_errors_total',
    'Non-fatal lookup errors reported during context resolution'
)


# Response Models
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContextResponse(CamelModel):
    """Resolved analysis context"""
    urns: List[str]
    anomaly_range: List[int]
    analysis_range: List[int]
    granularity: str
    compare_mode: str
    anomaly_urns: List[str]


class SessionResponse(CamelModel):
    """Session metadata shown next to the context"""
    name: str
    text: str
    owner: str
    permissions: str
    updated_by: str
    updated_time: Optional[int] = None
    modified: bool
    selected_urns: List[str]


class RedirectResponse(CamelModel):
    """Parameters the client must switch to"""
    session_id: str
    anomaly_id: Optional[str] = None


class ResolvedStateResponse(CamelModel):
    """Response model for a context resolution"""
    context: ContextResponse
    session: SessionResponse
    setup_mode: str
    errors: List[str]
    size_metric_urns: List[str]
    redirect: Optional[RedirectResponse] = None
    metric_id: Optional[str] = None
    anomaly_id: Optional[str] = None
    session_id: Optional[str] = None


def get_rootcause_service(request: Request) -> RootcauseService:
    return request.app.state.rootcause_service


@router.get("/rootcause/context", response_model=ResolvedStateResponse, response_model_by_alias=True)
async def resolve_context(
    metric_id: Optional[str] = Query(None, alias="metricId"),
    anomaly_id: Optional[str] = Query(None, alias="anomalyId"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
    anomaly_range_start: Optional[int] = Query(None, alias="anomalyRangeStart"),
    anomaly_range_end: Optional[int] = Query(None, alias="anomalyRangeEnd"),
    analysis_range_start: Optional[int] = Query(None, alias="analysisRangeStart"),
    analysis_range_end: Optional[int] = Query(None, alias="analysisRangeEnd"),
    granularity: Optional[str] = Query(None),
    compare_mode: Optional[str] = Query(None, alias="compareMode"),
    user_name: Optional[str] = Header(None, alias="X-User-Name"),
    service: RootcauseService = Depends(get_rootcause_service),
) -> ResolvedStateResponse:
    """
    Resolve the investigation context for the given parameters.

    A non-null `redirect` in the response means the client must replace its
    parameters with the ones given there.
    """
    if granularity is not None:
        try:
            Granularity.parse(granularity)
        except MalformedGranularityError as e:
            raise_validation_error(str(e), field="granularity", code=ErrorCode.MALFORMED_GRANULARITY)

    params = RootcauseParams(
        metric_id=metric_id,
        anomaly_id=anomaly_id,
        session_id=session_id,
        anomaly_range_start=anomaly_range_start,
        anomaly_range_end=anomaly_range_end,
        analysis_range_start=analysis_range_start,
        analysis_range_end=analysis_range_end,
        granularity=granularity,
        compare_mode=compare_mode,
    )

    state = await service.resolve(params, owner=user_name or "")

    resolution_count.labels(setup_mode=state.setup_mode.value).inc()
    if state.errors:
        resolution_error_count.inc(len(state.errors))
        logger.info("context_resolved_with_errors", errors=sorted(state.errors))

    return ResolvedStateResponse.model_validate(state.to_dict())
