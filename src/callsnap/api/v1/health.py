"""Health and status endpoints.

Provides liveness (/health) and the service status summary (/api/status)
with the number of meetings currently held in the store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from src.callsnap.api.deps import get_pipeline
from src.callsnap.config import get_settings
from src.callsnap.meetings.pipeline import MeetingPipeline

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check. No dependencies are checked."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


@router.get("/api/status")
async def service_status(pipeline: MeetingPipeline = Depends(get_pipeline)):
    """Service name, status and meeting count."""
    return await pipeline.status()
