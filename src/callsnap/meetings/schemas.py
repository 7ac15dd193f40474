"""Pydantic v2 schemas for the meeting processing domain.

Defines the data contracts for meetings, transcripts, segments, chapters,
analysis, search, captions, summaries, exports, and minutes previews. Every
pipeline component imports from this module.

Attributes are snake_case; all models serialize with camelCase aliases
(``scheduledAt``, ``editableText``) so the HTTP payloads keep the shape
the CallSnap web client reads.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting snake_case or camelCase, dumping camelCase by alias."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Enums ────────────────────────────────────────────────────────────────────


class MeetingStatus(str, Enum):
    """Lifecycle status of a meeting. Never moves back to SCHEDULED."""

    SCHEDULED = "scheduled"
    PROCESSED = "processed"


class VideoSourceType(str, Enum):
    """Where the meeting recording comes from."""

    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    UPLOAD = "upload"
    LOCAL = "local"


# ── Participant & Source ─────────────────────────────────────────────────────


class Participant(CamelModel):
    """A meeting attendee who receives the minutes."""

    name: str
    email: str


class VideoSource(CamelModel):
    """Recording source attached to a meeting."""

    type: VideoSourceType = VideoSourceType.YOUTUBE
    value: str = ""
    offline_mode: bool = False
    duration_seconds: int | None = None
    platform: str | None = None


# ── Transcript Models ────────────────────────────────────────────────────────


class Segment(CamelModel):
    """One timed utterance attributed to a speaker."""

    model_config = ConfigDict(frozen=True)

    id: str
    speaker: str
    start: float
    end: float
    duration: float
    text: str
    sentiment: str
    keywords: list[str] = Field(default_factory=list)


class Transcript(CamelModel):
    """Generated transcript plus the user-editable copy."""

    segments: list[Segment] = Field(default_factory=list)
    full_text: str = ""
    editable_text: str = ""
    last_generated_at: datetime | None = None
    last_edited_at: datetime | None = None


class Chapter(CamelModel):
    """A named, timed grouping aligned 1:1 with a segment."""

    id: str
    title: str
    summary: str
    start: float
    end: float


class Analysis(CamelModel):
    """Meeting-level sentiment and topic verdict."""

    sentiment: str = ""
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    topics: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class SearchIndexEntry(CamelModel):
    """Lowercased segment text kept for substring lookup."""

    segment_id: str
    text: str
    start: float
    end: float


class SearchMatch(CamelModel):
    """A segment matching a search query."""

    segment_id: str
    speaker: str
    start: float
    end: float
    text: str


class Accessibility(CamelModel):
    """Caption track and readability score for the transcript."""

    captions_vtt: str = ""
    readability_score: float | None = None


# ── Summary Models ───────────────────────────────────────────────────────────


class Summaries(CamelModel):
    """Named summary variants and the currently selected one."""

    default: str = ""
    styles: dict[str, str] = Field(default_factory=dict)
    language: str | None = None
    last_edited_at: datetime | None = None


class MeetingSettings(CamelModel):
    """Sticky defaults applied to later processing/resummarize calls."""

    preferred_summary_style: str
    preferred_language: str


# ── Export & Minutes Models ──────────────────────────────────────────────────


class ExportDescriptor(CamelModel):
    """Metadata of a rendered export, kept in the meeting's export history."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime
    format: str
    file_name: str
    mime_type: str
    size: int


class ExportArtifact(ExportDescriptor):
    """Export descriptor plus the base64-encoded payload for transport."""

    base64: str

    def descriptor(self) -> ExportDescriptor:
        return ExportDescriptor.model_validate(self.model_dump(exclude={"base64"}))


class EmailPreview(CamelModel):
    """Per-participant minutes message preview."""

    to: str
    subject: str
    body: str


# ── Meeting Model ────────────────────────────────────────────────────────────


class Meeting(CamelModel):
    """Root aggregate: a meeting and everything derived from its recording."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    scheduled_at: datetime
    created_at: datetime
    participants: list[Participant]
    status: MeetingStatus = MeetingStatus.SCHEDULED
    video_source: VideoSource = Field(default_factory=VideoSource)
    transcript: Transcript = Field(default_factory=Transcript)
    summary: str = ""
    summaries: Summaries = Field(default_factory=Summaries)
    chapters: list[Chapter] = Field(default_factory=list)
    analysis: Analysis = Field(default_factory=Analysis)
    search_index: list[SearchIndexEntry] = Field(default_factory=list)
    accessibility: Accessibility = Field(default_factory=Accessibility)
    highlights: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    exports: list[ExportDescriptor] = Field(default_factory=list)
    settings: MeetingSettings
    emails_sent_at: datetime | None = None
    processed_at: datetime | None = None


# ── Request Models ───────────────────────────────────────────────────────────


class ParticipantInput(CamelModel):
    """Participant row as submitted; blank rows are dropped on create."""

    name: str = ""
    email: str = ""


class MeetingCreate(CamelModel):
    """Request schema for scheduling a new meeting."""

    title: str | None = None
    scheduled_at: datetime | None = None
    participants: list[ParticipantInput] = Field(default_factory=list)
    video_source: VideoSource | None = None
    summary_style: str | None = None
    summary_language: str | None = None


class ProcessRequest(CamelModel):
    """Request schema for a full processing run."""

    summary_style: str | None = None
    summary_language: str | None = None
    preserve_manual_edits: bool | None = None


class ResummarizeRequest(CamelModel):
    """Request schema for regenerating the summary in another style/language."""

    style: str
    language: str | None = None


class TranscriptUpdate(CamelModel):
    """Request schema for a manual transcript edit."""

    editable_text: str = ""


class SummaryUpdate(CamelModel):
    """Request schema for a manual summary edit."""

    text: str = ""


class ExportRequest(CamelModel):
    """Request schema for exporting a meeting document."""

    format: str = "txt"
    include_chapters: bool = True
    include_action_items: bool = True
