"""Unit tests for the meeting foundation: schemas, errors, and the in-memory store.

Tests Pydantic schema construction, camelCase serialization, participant
normalization, and InMemoryMeetingStore CRUD with its atomic update
semantics (copy-on-write, rollback on failure, status monotonicity).
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.callsnap.meetings.errors import (
    MeetingError,
    MeetingNotFoundError,
    MeetingPreconditionError,
    MeetingValidationError,
)
from src.callsnap.meetings.repository import (
    InMemoryMeetingStore,
    normalize_participants,
)
from src.callsnap.meetings.schemas import (
    Analysis,
    ExportArtifact,
    Meeting,
    MeetingCreate,
    MeetingSettings,
    MeetingStatus,
    ParticipantInput,
    Segment,
    TranscriptUpdate,
    VideoSource,
    VideoSourceType,
)


# ── Fixtures ─────────────────────────────────────────────────────────────────


NOW = datetime(2026, 3, 2, 14, 0, tzinfo=timezone.utc)


def _make_meeting_create(**overrides) -> MeetingCreate:
    defaults = {
        "title": "Sprint Review",
        "scheduled_at": NOW,
        "participants": [ParticipantInput(name="Ana", email="ana@x.com")],
    }
    defaults.update(overrides)
    return MeetingCreate(**defaults)


def _make_segment(**overrides) -> Segment:
    defaults = {
        "id": "seg-1",
        "speaker": "Speaker 1",
        "start": 0.0,
        "end": 40.0,
        "duration": 40.0,
        "text": "Discussion about the product roadmap.",
        "sentiment": "positive",
    }
    defaults.update(overrides)
    return Segment(**defaults)


# ── Schema Tests ─────────────────────────────────────────────────────────────


class TestSchemas:
    """Tests for schema construction and serialization."""

    def test_meeting_dumps_camel_case_aliases(self):
        meeting = Meeting(
            title="Weekly",
            scheduled_at=NOW,
            created_at=NOW,
            participants=[],
            settings=MeetingSettings(
                preferred_summary_style="bullets", preferred_language="pt-BR"
            ),
        )
        data = meeting.model_dump(by_alias=True)
        assert "scheduledAt" in data
        assert "searchIndex" in data
        assert "emailsSentAt" in data
        assert data["transcript"]["editableText"] == ""
        assert data["settings"]["preferredSummaryStyle"] == "bullets"

    def test_meeting_defaults(self):
        meeting = Meeting(
            title="Weekly",
            scheduled_at=NOW,
            created_at=NOW,
            participants=[],
            settings=MeetingSettings(
                preferred_summary_style="bullets", preferred_language="pt-BR"
            ),
        )
        assert meeting.status == MeetingStatus.SCHEDULED
        assert meeting.summary == ""
        assert meeting.exports == []
        assert meeting.emails_sent_at is None
        assert meeting.video_source.type == VideoSourceType.YOUTUBE

    def test_request_accepts_camel_and_snake_case(self):
        assert TranscriptUpdate(editableText="a").editable_text == "a"
        assert TranscriptUpdate(editable_text="b").editable_text == "b"

    def test_meeting_create_parses_camel_payload(self):
        data = MeetingCreate.model_validate(
            {
                "title": "Kickoff",
                "scheduledAt": "2026-03-02T14:00:00+00:00",
                "participants": [{"name": "Ana", "email": "ana@x.com"}],
                "videoSource": {"type": "upload", "value": "file.mp4", "offlineMode": True},
                "summaryStyle": "tldr",
            }
        )
        assert data.scheduled_at == NOW
        assert data.video_source == VideoSource(
            type=VideoSourceType.UPLOAD, value="file.mp4", offline_mode=True
        )
        assert data.summary_style == "tldr"

    def test_segment_is_frozen(self):
        segment = _make_segment()
        with pytest.raises(ValidationError):
            segment.text = "changed"

    def test_analysis_score_bounds(self):
        with pytest.raises(ValidationError):
            Analysis(sentiment="positive", score=1.5)

    def test_export_artifact_descriptor_drops_payload(self):
        artifact = ExportArtifact(
            created_at=NOW,
            format="txt",
            file_name="weekly.txt",
            mime_type="text/plain",
            size=3,
            base64="YWJj",
        )
        descriptor = artifact.descriptor()
        assert descriptor.id == artifact.id
        assert "base64" not in descriptor.model_dump()
        assert descriptor.file_name == "weekly.txt"


# ── Error Tests ──────────────────────────────────────────────────────────────


class TestErrors:
    """Tests for the error taxonomy."""

    def test_errors_share_base(self):
        assert issubclass(MeetingValidationError, MeetingError)
        assert issubclass(MeetingNotFoundError, MeetingError)
        assert issubclass(MeetingPreconditionError, MeetingError)

    def test_not_found_message_carries_id(self):
        error = MeetingNotFoundError("m-1")
        assert error.meeting_id == "m-1"
        assert "m-1" in str(error)
        assert isinstance(error, LookupError)

    def test_validation_error_is_value_error(self):
        assert isinstance(MeetingValidationError("bad"), ValueError)


# ── Participant Normalization ────────────────────────────────────────────────


class TestNormalizeParticipants:
    """Tests for participant row normalization."""

    def test_drops_rows_missing_name_or_email(self):
        rows = [
            ParticipantInput(name=" Ana ", email=" ana@x.com "),
            ParticipantInput(name="Bruno", email=""),
            ParticipantInput(name="  ", email="c@x.com"),
        ]
        participants = normalize_participants(rows)
        assert len(participants) == 1
        assert participants[0].name == "Ana"
        assert participants[0].email == "ana@x.com"

    def test_raises_when_no_row_is_complete(self):
        with pytest.raises(MeetingValidationError):
            normalize_participants([ParticipantInput(name="Ana", email=" ")])

    def test_raises_for_empty_list(self):
        with pytest.raises(MeetingValidationError):
            normalize_participants([])


# ── Store Tests ──────────────────────────────────────────────────────────────


class TestInMemoryMeetingStore:
    """Tests for InMemoryMeetingStore CRUD and update semantics."""

    @pytest.mark.asyncio
    async def test_create_and_get(self):
        store = InMemoryMeetingStore()
        created = await store.create(_make_meeting_create())
        fetched = await store.get(created.id)
        assert fetched is not None
        assert fetched.id == created.id
        assert fetched.title == "Sprint Review"
        assert fetched.status == MeetingStatus.SCHEDULED
        assert fetched.scheduled_at == NOW

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create(title="   ", scheduled_at=None))
        assert meeting.title == "Reunião sem título"
        assert meeting.scheduled_at == meeting.created_at
        assert meeting.settings.preferred_summary_style == "bullets"
        assert meeting.settings.preferred_language == "pt-BR"

    @pytest.mark.asyncio
    async def test_create_uses_requested_summary_settings(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(
            _make_meeting_create(summary_style="tldr", summary_language="en-US")
        )
        assert meeting.settings.preferred_summary_style == "tldr"
        assert meeting.settings.preferred_language == "en-US"

    @pytest.mark.asyncio
    async def test_create_rejects_without_participants(self):
        store = InMemoryMeetingStore()
        with pytest.raises(MeetingValidationError):
            await store.create(_make_meeting_create(participants=[]))
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self):
        store = InMemoryMeetingStore()
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_returned_meetings_are_copies(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create())
        meeting.title = "Mutated outside the store"
        fetched = await store.get(meeting.id)
        assert fetched.title == "Sprint Review"

    @pytest.mark.asyncio
    async def test_list_and_count(self):
        store = InMemoryMeetingStore()
        await store.create(_make_meeting_create(title="A"))
        await store.create(_make_meeting_create(title="B"))
        assert await store.count() == 2
        assert {m.title for m in await store.list()} == {"A", "B"}

    @pytest.mark.asyncio
    async def test_update_applies_mutator(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create())

        def rename(m: Meeting) -> None:
            m.title = "Renamed"

        updated = await store.update(meeting.id, rename)
        assert updated.title == "Renamed"
        assert (await store.get(meeting.id)).title == "Renamed"

    @pytest.mark.asyncio
    async def test_update_unknown_raises_not_found(self):
        store = InMemoryMeetingStore()
        with pytest.raises(MeetingNotFoundError):
            await store.update("missing", lambda m: None)

    @pytest.mark.asyncio
    async def test_unknown_ids_do_not_allocate_locks(self):
        store = InMemoryMeetingStore()
        for i in range(50):
            with pytest.raises(MeetingNotFoundError):
                await store.update(f"missing-{i}", lambda m: None)
        assert store._locks == {}

    @pytest.mark.asyncio
    async def test_one_lock_per_created_meeting(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create())
        with pytest.raises(MeetingNotFoundError):
            await store.update("missing", lambda m: None)
        assert list(store._locks) == [meeting.id]

    @pytest.mark.asyncio
    async def test_failing_mutator_leaves_meeting_untouched(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create())

        def half_done(m: Meeting) -> None:
            m.title = "Partial"
            raise MeetingPreconditionError("boom")

        with pytest.raises(MeetingPreconditionError):
            await store.update(meeting.id, half_done)
        assert (await store.get(meeting.id)).title == "Sprint Review"

    @pytest.mark.asyncio
    async def test_update_rejects_id_change(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create())

        def change_id(m: Meeting) -> None:
            m.id = "other"

        with pytest.raises(MeetingPreconditionError):
            await store.update(meeting.id, change_id)
        assert await store.get("other") is None

    @pytest.mark.asyncio
    async def test_update_rejects_status_regression(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create())

        def mark_processed(m: Meeting) -> None:
            m.status = MeetingStatus.PROCESSED

        def revert(m: Meeting) -> None:
            m.status = MeetingStatus.SCHEDULED

        await store.update(meeting.id, mark_processed)
        with pytest.raises(MeetingPreconditionError):
            await store.update(meeting.id, revert)
        assert (await store.get(meeting.id)).status == MeetingStatus.PROCESSED

    @pytest.mark.asyncio
    async def test_concurrent_updates_are_serialized(self):
        store = InMemoryMeetingStore()
        meeting = await store.create(_make_meeting_create())

        def append_highlight(m: Meeting) -> None:
            m.highlights.append("x")

        await asyncio.gather(
            *(store.update(meeting.id, append_highlight) for _ in range(10))
        )
        assert len((await store.get(meeting.id)).highlights) == 10
