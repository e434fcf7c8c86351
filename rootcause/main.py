"""
FastAPI backend for the root-cause context service
Main application entry point with middleware, routes, and startup configuration
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST, Counter, Histogram

from rootcause.api import health, rootcause
from rootcause.config.settings import Settings, get_settings
from rootcause.services.record_source import InMemoryRecordSource, RecordSource
from rootcause.services.rootcause_service import RootcauseService
from rootcause.utils.errors import ErrorCode, create_error_response
from rootcause.utils.logging import setup_logging

logger = structlog.get_logger(__name__)

# Prometheus metrics
request_count = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
request_duration = Histogram('http_request_duration_seconds', 'HTTP request duration')


def create_app(
    record_source: Optional[RecordSource] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    """
    Build the application.

    Args:
        record_source: Where metric, anomaly and session records come from
            (an empty in-memory source if omitted)
        settings: Application settings (environment-derived if omitted)
    """
    settings = settings or get_settings()
    source = record_source or InMemoryRecordSource()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown events"""
        setup_logging(settings.log_level, json_logs=settings.is_production)
        logger.info(
            "Starting root-cause context service",
            environment=settings.environment,
            record_source=source.get_name(),
            timezone=settings.timezone
        )
        yield
        logger.info("Shutting down root-cause context service")

    app = FastAPI(
        title=settings.app_name,
        description="Resolves the analysis context of root-cause investigations",
        version="1.0.0",
        debug=settings.debug,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan
    )
    app.state.rootcause_service = RootcauseService(source, settings)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Prometheus metrics collection middleware"""
        with request_duration.time():
            response = await call_next(request)

        request_count.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()

        return response

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Request logging middleware"""
        logger.info(
            "HTTP request",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None
        )

        response = await call_next(request)

        logger.info(
            "HTTP response",
            status_code=response.status_code,
            method=request.method,
            path=request.url.path
        )

        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler"""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method
        )

        details = None if settings.is_production else {"type": exc.__class__.__name__, "reason": str(exc)}
        return JSONResponse(
            status_code=500,
            content=create_error_response(ErrorCode.INTERNAL_ERROR, details=details)
        )

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(rootcause.router, tags=["Root Cause"])

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint"""
        return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/")
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information"""
        return {
            "message": settings.app_name,
            "version": "1.0.0",
            "context": "/rootcause/context",
            "health_check": "/health/liveness",
            "metrics": "/metrics"
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "rootcause.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower()
    )
