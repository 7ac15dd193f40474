"""REST endpoints for the meeting processing pipeline.

Provides endpoints for scheduling and listing meetings, running the
processing pipeline, resummarizing, manual transcript/summary edits,
transcript search, document export, and minutes distribution.

Domain errors map onto HTTP statuses: validation 400, unknown meeting 404,
missing prerequisite state (no summary yet, not processed) 409.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field

from src.callsnap.api.deps import get_pipeline
from src.callsnap.meetings.errors import (
    MeetingNotFoundError,
    MeetingPreconditionError,
    MeetingValidationError,
)
from src.callsnap.meetings.pipeline import MeetingPipeline
from src.callsnap.meetings.schemas import (
    CamelModel,
    EmailPreview,
    ExportArtifact,
    ExportRequest,
    Meeting,
    MeetingCreate,
    ProcessRequest,
    ResummarizeRequest,
    SearchMatch,
    SummaryUpdate,
    TranscriptUpdate,
)

router = APIRouter(prefix="/api/meetings", tags=["meetings"])


# ── Response Schemas ─────────────────────────────────────────────────────────


class MeetingResponse(CamelModel):
    """Single meeting envelope."""

    meeting: Meeting


class MeetingListResponse(CamelModel):
    """Meetings, newest first."""

    meetings: list[Meeting] = Field(default_factory=list)


class SearchResponse(CamelModel):
    """Transcript search matches in segment order."""

    matches: list[SearchMatch] = Field(default_factory=list)


class ExportResponse(CamelModel):
    """Updated meeting plus the rendered export with its base64 payload."""

    meeting: Meeting
    export: ExportArtifact


class MinutesResponse(CamelModel):
    """Updated meeting plus the per-participant message previews."""

    meeting: Meeting
    email_preview: list[EmailPreview] = Field(default_factory=list)


# ── Error Mapping ────────────────────────────────────────────────────────────


@contextmanager
def _meeting_errors() -> Iterator[None]:
    """Translate domain errors raised inside the block into HTTPExceptions."""
    try:
        yield
    except MeetingNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except MeetingValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except MeetingPreconditionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc


# ── REST Endpoints ───────────────────────────────────────────────────────────


@router.get("", response_model=MeetingListResponse)
async def list_meetings(
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MeetingListResponse:
    """List all meetings, newest first."""
    return MeetingListResponse(meetings=await pipeline.list_meetings())


@router.post("", response_model=MeetingResponse, status_code=status.HTTP_201_CREATED)
async def create_meeting(
    body: MeetingCreate,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MeetingResponse:
    """Schedule a meeting. Requires at least one participant with name and email."""
    with _meeting_errors():
        meeting = await pipeline.create_meeting(body)
    return MeetingResponse(meeting=meeting)


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(
    meeting_id: str,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MeetingResponse:
    """Get meeting details by ID."""
    with _meeting_errors():
        meeting = await pipeline.get_meeting(meeting_id)
    return MeetingResponse(meeting=meeting)


@router.post("/{meeting_id}/transcribe", response_model=MeetingResponse)
async def process_meeting(
    meeting_id: str,
    body: ProcessRequest | None = None,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MeetingResponse:
    """Run the full processing pipeline (transcript, chapters, analysis, summary)."""
    body = body or ProcessRequest()
    with _meeting_errors():
        meeting = await pipeline.process(
            meeting_id,
            summary_style=body.summary_style,
            summary_language=body.summary_language,
            preserve_manual_edits=body.preserve_manual_edits,
        )
    return MeetingResponse(meeting=meeting)


@router.post("/{meeting_id}/resummarize", response_model=MeetingResponse)
async def resummarize_meeting(
    meeting_id: str,
    body: ResummarizeRequest,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MeetingResponse:
    """Regenerate the summary in another style or language."""
    with _meeting_errors():
        meeting = await pipeline.resummarize(meeting_id, body.style, body.language)
    return MeetingResponse(meeting=meeting)


@router.patch("/{meeting_id}/transcript", response_model=MeetingResponse)
async def save_transcript(
    meeting_id: str,
    body: TranscriptUpdate,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MeetingResponse:
    """Save a manually edited transcript."""
    with _meeting_errors():
        meeting = await pipeline.save_transcript(meeting_id, body.editable_text)
    return MeetingResponse(meeting=meeting)


@router.patch("/{meeting_id}/summary", response_model=MeetingResponse)
async def save_summary(
    meeting_id: str,
    body: SummaryUpdate,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MeetingResponse:
    """Save a manual summary as the active ``custom`` style."""
    with _meeting_errors():
        meeting = await pipeline.save_summary(meeting_id, body.text)
    return MeetingResponse(meeting=meeting)


@router.get("/{meeting_id}/search", response_model=SearchResponse)
async def search_transcript(
    meeting_id: str,
    q: str = Query(default="", description="Case-insensitive search term"),
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> SearchResponse:
    """Search the meeting transcript."""
    with _meeting_errors():
        matches = await pipeline.search(meeting_id, q)
    return SearchResponse(matches=matches)


@router.post("/{meeting_id}/export", response_model=ExportResponse)
async def export_meeting(
    meeting_id: str,
    body: ExportRequest | None = None,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> ExportResponse:
    """Render a document export (txt, md, pdf, docx)."""
    body = body or ExportRequest()
    with _meeting_errors():
        meeting, artifact = await pipeline.export(
            meeting_id,
            format=body.format,
            include_chapters=body.include_chapters,
            include_action_items=body.include_action_items,
        )
    return ExportResponse(meeting=meeting, export=artifact)


@router.post("/{meeting_id}/minutes", response_model=MinutesResponse)
async def send_minutes(
    meeting_id: str,
    pipeline: MeetingPipeline = Depends(get_pipeline),
) -> MinutesResponse:
    """Send the minutes to every participant (preview only)."""
    with _meeting_errors():
        meeting, previews = await pipeline.send_minutes(meeting_id)
    return MinutesResponse(meeting=meeting, email_preview=previews)
