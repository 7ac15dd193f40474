"""FastAPI dependency injection for the meeting pipeline.

The pipeline is built once by the app factory and kept on ``app.state``;
endpoints receive it through ``Depends(get_pipeline)``.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from src.callsnap.meetings.pipeline import MeetingPipeline


def get_pipeline(request: Request) -> MeetingPipeline:
    """Retrieve the MeetingPipeline from app.state, 503 if not available."""
    pipeline = getattr(request.app.state, "meeting_pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Meeting pipeline not initialized",
        )
    return pipeline
