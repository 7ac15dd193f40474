"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
the meeting pipeline on ``app.state``, and the v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.callsnap.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.callsnap.api.v1.router import router as v1_router
from src.callsnap.config import get_settings
from src.callsnap.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.callsnap.meetings.pipeline import MeetingPipeline


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: configure logging and Sentry on startup."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    if settings.SENTRY_DSN:
        try:
            init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)
        except Exception:
            log.warning("sentry_init_failed", exc_info=True)

    log.info(
        "service_started",
        service=settings.SERVICE_NAME,
        environment=settings.ENVIRONMENT.value,
    )
    yield
    log.info("service_stopped", service=settings.SERVICE_NAME)


def create_app(pipeline: MeetingPipeline | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        pipeline: Pipeline to serve; built from settings when omitted.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version="0.1.0",
        description="Meeting transcription, summarization and minutes pipeline",
        lifespan=lifespan,
    )

    # Set eagerly so the pipeline exists even when lifespan is not run
    app.state.meeting_pipeline = pipeline or MeetingPipeline.from_settings(settings)

    # Middleware is added in reverse order (last added = outermost)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
