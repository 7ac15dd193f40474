"""MeetingPipeline -- the operation surface of the meeting processing domain.

Orchestrates the store and the pipeline components:

1. create_meeting: validate participants and schedule a meeting
2. process: transcribe, derive chapters/analysis/index/captions, summarize
3. resummarize / save_summary / save_transcript: rework a processed meeting
4. search / export / send_minutes: read the current artifact

Every mutation is one atomic read-modify-write against the MeetingStore:
the work runs inside the store's mutator, so a failing step raises before
anything is written.

Exports:
    MeetingPipeline: Main pipeline service.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from src.callsnap.config import Settings
from src.callsnap.core.monitoring import (
    exports_total,
    meetings_created_total,
    minutes_sent_total,
    track_processing_run,
)
from src.callsnap.meetings.errors import (
    MeetingNotFoundError,
    MeetingPreconditionError,
    MeetingValidationError,
)
from src.callsnap.meetings.minutes.distributor import MinutesNotifier
from src.callsnap.meetings.minutes.exporter import ExportRenderer, resolve_format
from src.callsnap.meetings.minutes.summarizer import (
    CUSTOM_STYLE,
    Summarizer,
    apply_manual_summary,
    is_manual_summary_active,
)
from src.callsnap.meetings.processing.analysis import (
    analyze,
    derive_action_items,
    derive_highlights,
)
from src.callsnap.meetings.processing.captions import build_captions, readability_score
from src.callsnap.meetings.processing.chapters import build_chapters
from src.callsnap.meetings.processing.search import build_search_index, search_index
from src.callsnap.meetings.processing.transcription import (
    CorpusTranscriptionBackend,
    TranscriptionBackend,
    render_full_text,
)
from src.callsnap.meetings.repository import InMemoryMeetingStore, MeetingStore
from src.callsnap.meetings.schemas import (
    Accessibility,
    EmailPreview,
    ExportArtifact,
    Meeting,
    MeetingCreate,
    MeetingSettings,
    MeetingStatus,
    SearchMatch,
    Transcript,
)

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MeetingPipeline:
    """Runs meeting operations against a MeetingStore.

    Args:
        store: MeetingStore holding the meetings.
        transcription_backend: Backend producing transcript segments.
        summarizer: Summary generator (default Summarizer()).
        exporter: Export renderer (default ExportRenderer()).
        notifier: Minutes notifier (default MinutesNotifier()).
        preserve_manual_edits: Default for ``process(preserve_manual_edits=...)``.
        service_name: Name reported by ``status``.
    """

    def __init__(
        self,
        store: MeetingStore,
        transcription_backend: TranscriptionBackend,
        summarizer: Summarizer | None = None,
        exporter: ExportRenderer | None = None,
        notifier: MinutesNotifier | None = None,
        preserve_manual_edits: bool = False,
        service_name: str = "CallSnap API",
    ) -> None:
        self._store = store
        self._backend = transcription_backend
        self._summarizer = summarizer or Summarizer()
        self._exporter = exporter or ExportRenderer()
        self._notifier = notifier or MinutesNotifier()
        self._preserve_manual_edits = preserve_manual_edits
        self._service_name = service_name

    @classmethod
    def from_settings(cls, settings: Settings) -> MeetingPipeline:
        """Build a pipeline with the in-memory store and corpus backend."""
        store = InMemoryMeetingStore(
            default_title=settings.DEFAULT_MEETING_TITLE,
            default_style=settings.DEFAULT_SUMMARY_STYLE,
            default_language=settings.DEFAULT_SUMMARY_LANGUAGE,
        )
        backend = CorpusTranscriptionBackend(
            segment_seconds=settings.SEGMENT_SECONDS,
            gap_seconds=settings.SEGMENT_GAP_SECONDS,
        )
        return cls(
            store=store,
            transcription_backend=backend,
            preserve_manual_edits=settings.PRESERVE_MANUAL_EDITS,
            service_name=settings.SERVICE_NAME,
        )

    # ── Queries ──────────────────────────────────────────────────────────

    async def status(self) -> dict:
        return {
            "service": self._service_name,
            "status": "ok",
            "meetings": await self._store.count(),
        }

    async def list_meetings(self) -> list[Meeting]:
        """All meetings, newest first."""
        meetings = await self._store.list()
        # Store lists in insertion order; reversing first breaks created_at ties
        return sorted(reversed(meetings), key=lambda m: m.created_at, reverse=True)

    async def get_meeting(self, meeting_id: str) -> Meeting:
        """Get a meeting by id.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
        """
        meeting = await self._store.get(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        return meeting

    async def search(self, meeting_id: str, query: str) -> list[SearchMatch]:
        """Search the meeting transcript for ``query``.

        Raises:
            MeetingValidationError: If the query is blank.
            MeetingNotFoundError: If the meeting does not exist.
        """
        if not (query or "").strip():
            raise MeetingValidationError("Search query must not be empty")
        meeting = await self.get_meeting(meeting_id)
        matches = search_index(meeting.search_index, meeting.transcript.segments, query)
        logger.info(
            "transcript_searched",
            meeting_id=meeting_id,
            query=query.strip(),
            matches=len(matches),
        )
        return matches

    # ── Creation & Processing ────────────────────────────────────────────

    async def create_meeting(self, data: MeetingCreate) -> Meeting:
        """Schedule a new meeting.

        Raises:
            MeetingValidationError: If no participant has both name and email.
        """
        meeting = await self._store.create(data)
        meetings_created_total.inc()
        return meeting

    async def process(
        self,
        meeting_id: str,
        summary_style: str | None = None,
        summary_language: str | None = None,
        preserve_manual_edits: bool | None = None,
    ) -> Meeting:
        """Run the full processing pipeline for a meeting.

        Segments are generated first; chapters, analysis, search index and
        captions are all derived from that same segment set, then the
        summary is produced. Every derived collection is replaced.

        Args:
            meeting_id: Meeting to process.
            summary_style: Summary style; defaults to the sticky setting.
            summary_language: Summary language; defaults to the sticky setting.
            preserve_manual_edits: Keep an edited transcript and a manual
                custom summary active across this run. Defaults to the
                pipeline setting.

        Returns:
            The processed Meeting.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            MeetingPreconditionError: If transcription produced no segments.
        """
        preserve = (
            self._preserve_manual_edits
            if preserve_manual_edits is None
            else preserve_manual_edits
        )

        def apply_run(meeting: Meeting) -> None:
            style = summary_style or meeting.settings.preferred_summary_style
            language = summary_language or meeting.settings.preferred_language

            segments = self._backend.transcribe(meeting, language)
            if not segments:
                raise MeetingPreconditionError(
                    f"Transcription produced no segments for meeting {meeting.id}"
                )

            now = _utcnow()
            previous_transcript = meeting.transcript
            previous_summaries = meeting.summaries
            full_text = render_full_text(segments)

            keep_transcript_edit = (
                preserve
                and previous_transcript.last_edited_at is not None
                and bool(previous_transcript.editable_text.strip())
            )
            meeting.transcript = Transcript(
                segments=segments,
                full_text=full_text,
                editable_text=(
                    previous_transcript.editable_text if keep_transcript_edit else full_text
                ),
                last_generated_at=now,
                last_edited_at=(
                    previous_transcript.last_edited_at if keep_transcript_edit else None
                ),
            )
            meeting.chapters = build_chapters(segments)
            meeting.analysis = analyze(segments, language)
            meeting.search_index = build_search_index(segments)
            meeting.accessibility = Accessibility(
                captions_vtt=build_captions(segments),
                readability_score=readability_score(segments),
            )
            meeting.highlights = derive_highlights(segments)
            meeting.action_items = derive_action_items(segments, language)

            summaries = self._summarizer.summarize(meeting, style, language)
            resolved_style = self._summarizer.resolve_style(
                summaries.styles, style, meeting.settings.preferred_summary_style
            )
            if preserve and is_manual_summary_active(previous_summaries):
                summaries = apply_manual_summary(
                    summaries,
                    previous_summaries.styles[CUSTOM_STYLE],
                    previous_summaries.last_edited_at or now,
                )

            meeting.summaries = summaries
            meeting.summary = summaries.default
            meeting.status = MeetingStatus.PROCESSED
            meeting.processed_at = now
            meeting.settings = MeetingSettings(
                preferred_summary_style=resolved_style,
                preferred_language=language,
            )

        with track_processing_run():
            meeting = await self._store.update(meeting_id, apply_run)

        logger.info(
            "meeting_processed",
            meeting_id=meeting_id,
            segments=len(meeting.transcript.segments),
            chapters=len(meeting.chapters),
            style=meeting.settings.preferred_summary_style,
            language=meeting.settings.preferred_language,
            preserved_edits=preserve,
        )
        return meeting

    # ── Manual Rework ────────────────────────────────────────────────────

    async def resummarize(
        self,
        meeting_id: str,
        style: str,
        language: str | None = None,
    ) -> Meeting:
        """Regenerate the summary in ``style``, keeping earlier styles.

        Raises:
            MeetingValidationError: If ``style`` is blank.
            MeetingNotFoundError: If the meeting does not exist.
            MeetingPreconditionError: If the meeting was never processed.
        """
        requested = (style or "").strip()
        if not requested:
            raise MeetingValidationError("Summary style must not be empty")

        def apply_resummarize(meeting: Meeting) -> None:
            if meeting.status != MeetingStatus.PROCESSED:
                raise MeetingPreconditionError(
                    "Meeting must be processed before it can be resummarized"
                )
            resolved_language = language or meeting.settings.preferred_language
            summaries = self._summarizer.summarize(meeting, requested, resolved_language)
            meeting.summaries = summaries
            meeting.summary = summaries.default
            meeting.settings = MeetingSettings(
                preferred_summary_style=self._summarizer.resolve_style(
                    summaries.styles, requested, meeting.settings.preferred_summary_style
                ),
                preferred_language=resolved_language,
            )

        meeting = await self._store.update(meeting_id, apply_resummarize)
        logger.info(
            "meeting_resummarized",
            meeting_id=meeting_id,
            style=meeting.settings.preferred_summary_style,
            language=meeting.settings.preferred_language,
        )
        return meeting

    async def save_transcript(self, meeting_id: str, editable_text: str) -> Meeting:
        """Replace the editable transcript; the generated full text is kept.

        Raises:
            MeetingValidationError: If the text is blank.
            MeetingNotFoundError: If the meeting does not exist.
        """
        if not (editable_text or "").strip():
            raise MeetingValidationError("Transcript text must not be empty")

        def apply_edit(meeting: Meeting) -> None:
            meeting.transcript = meeting.transcript.model_copy(
                update={"editable_text": editable_text, "last_edited_at": _utcnow()}
            )

        meeting = await self._store.update(meeting_id, apply_edit)
        logger.info("transcript_edited", meeting_id=meeting_id, length=len(editable_text))
        return meeting

    async def save_summary(self, meeting_id: str, text: str) -> Meeting:
        """Save a manual summary as the ``custom`` style and make it active.

        Raises:
            MeetingValidationError: If the text is blank.
            MeetingNotFoundError: If the meeting does not exist.
        """
        if not (text or "").strip():
            raise MeetingValidationError("Summary text must not be empty")

        def apply_edit(meeting: Meeting) -> None:
            meeting.summaries = apply_manual_summary(meeting.summaries, text, _utcnow())
            meeting.summary = meeting.summaries.default

        meeting = await self._store.update(meeting_id, apply_edit)
        logger.info("summary_edited", meeting_id=meeting_id, length=len(text))
        return meeting

    # ── Outputs ──────────────────────────────────────────────────────────

    async def export(
        self,
        meeting_id: str,
        format: str = "txt",
        include_chapters: bool = True,
        include_action_items: bool = True,
    ) -> tuple[Meeting, ExportArtifact]:
        """Render an export and append its descriptor to the export history.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            MeetingPreconditionError: If the meeting has no summary yet.
        """
        rendered: list[ExportArtifact] = []

        def apply_export(meeting: Meeting) -> None:
            artifact = self._exporter.render(
                meeting,
                format=format,
                include_chapters=include_chapters,
                include_action_items=include_action_items,
            )
            meeting.exports.append(artifact.descriptor())
            rendered.append(artifact)

        meeting = await self._store.update(meeting_id, apply_export)
        artifact = rendered[0]
        # Label by resolved extension so arbitrary formats do not add series
        extension, _ = resolve_format(artifact.format)
        exports_total.labels(format=extension).inc()
        return meeting, artifact

    async def send_minutes(self, meeting_id: str) -> tuple[Meeting, list[EmailPreview]]:
        """Build the minutes previews and stamp ``emails_sent_at``.

        Re-sending overwrites the timestamp.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            MeetingPreconditionError: If the meeting has no summary yet.
        """
        previews: list[EmailPreview] = []

        def apply_dispatch(meeting: Meeting) -> None:
            previews.extend(self._notifier.dispatch(meeting))
            meeting.emails_sent_at = _utcnow()

        meeting = await self._store.update(meeting_id, apply_dispatch)
        minutes_sent_total.inc()
        logger.info(
            "minutes_sent",
            meeting_id=meeting_id,
            recipients=len(previews),
        )
        return meeting, previews
