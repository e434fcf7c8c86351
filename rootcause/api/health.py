"""
Health check endpoints for monitoring system status
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
import structlog

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/liveness")
async def liveness_probe():
    """Kubernetes liveness probe endpoint"""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/readiness")
async def readiness_probe(request: Request):
    """Kubernetes readiness probe endpoint"""
    ready = getattr(request.app.state, "rootcause_service", None) is not None
    return {
        "status": "ready" if ready else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
