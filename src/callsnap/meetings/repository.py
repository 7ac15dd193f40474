"""Meeting store -- keyed CRUD for Meeting entities.

Defines the MeetingStore protocol the pipeline depends on and the
InMemoryMeetingStore used by the service. Writes are full-entity replaces
performed as an atomic read-modify-write: ``update`` hands the mutator a deep
copy and stores it only when the mutator returns without raising. A lock per
meeting id serializes concurrent mutations of the same entity.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

import structlog

from src.callsnap.meetings.errors import (
    MeetingNotFoundError,
    MeetingPreconditionError,
    MeetingValidationError,
)
from src.callsnap.meetings.schemas import (
    Meeting,
    MeetingCreate,
    MeetingSettings,
    MeetingStatus,
    Participant,
    ParticipantInput,
    VideoSource,
)

logger = structlog.get_logger(__name__)

MeetingMutator = Callable[[Meeting], None]


class MeetingStore(Protocol):
    """Storage capability for meetings; backends are swappable."""

    async def create(self, data: MeetingCreate) -> Meeting: ...

    async def get(self, meeting_id: str) -> Meeting | None: ...

    async def list(self) -> list[Meeting]: ...

    async def update(self, meeting_id: str, mutator: MeetingMutator) -> Meeting: ...

    async def count(self) -> int: ...


# ── Helpers ──────────────────────────────────────────────────────────────────


def normalize_participants(rows: list[ParticipantInput]) -> list[Participant]:
    """Keep rows whose trimmed name and email are both non-empty.

    Raises:
        MeetingValidationError: If no well-formed participant remains.
    """
    participants = [
        Participant(name=row.name.strip(), email=row.email.strip())
        for row in rows
        if row.name.strip() and row.email.strip()
    ]
    if not participants:
        raise MeetingValidationError(
            "At least one participant with name and email is required"
        )
    return participants


# ── InMemoryMeetingStore ─────────────────────────────────────────────────────


class InMemoryMeetingStore:
    """Process-lifetime meeting store backed by a dict.

    Args:
        default_title: Title used when the request title is blank.
        default_style: Initial preferred summary style.
        default_language: Initial preferred summary language.
    """

    def __init__(
        self,
        default_title: str = "Reunião sem título",
        default_style: str = "bullets",
        default_language: str = "pt-BR",
    ) -> None:
        self._meetings: dict[str, Meeting] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._default_title = default_title
        self._default_style = default_style
        self._default_language = default_language

    async def create(self, data: MeetingCreate) -> Meeting:
        """Build and store a new scheduled meeting.

        Raises:
            MeetingValidationError: If no well-formed participant was given.
        """
        participants = normalize_participants(data.participants)
        now = datetime.now(timezone.utc)
        meeting = Meeting(
            title=(data.title or "").strip() or self._default_title,
            scheduled_at=data.scheduled_at or now,
            created_at=now,
            participants=participants,
            video_source=data.video_source or VideoSource(),
            settings=MeetingSettings(
                preferred_summary_style=data.summary_style or self._default_style,
                preferred_language=data.summary_language or self._default_language,
            ),
        )
        self._meetings[meeting.id] = meeting
        self._locks[meeting.id] = asyncio.Lock()
        logger.info(
            "meeting_created",
            meeting_id=meeting.id,
            participants=len(participants),
        )
        return meeting.model_copy(deep=True)

    async def get(self, meeting_id: str) -> Meeting | None:
        meeting = self._meetings.get(meeting_id)
        if meeting is None:
            return None
        return meeting.model_copy(deep=True)

    async def list(self) -> list[Meeting]:
        return [m.model_copy(deep=True) for m in self._meetings.values()]

    async def count(self) -> int:
        return len(self._meetings)

    async def update(self, meeting_id: str, mutator: MeetingMutator) -> Meeting:
        """Apply ``mutator`` to a copy of the meeting and store the result.

        Raises:
            MeetingNotFoundError: If the meeting does not exist.
            MeetingPreconditionError: If the write would revert a processed
                meeting to scheduled.
        """
        # Locks exist only for stored meetings
        lock = self._locks.get(meeting_id)
        if lock is None:
            raise MeetingNotFoundError(meeting_id)
        async with lock:
            current = self._meetings.get(meeting_id)
            if current is None:
                raise MeetingNotFoundError(meeting_id)

            working = current.model_copy(deep=True)
            mutator(working)

            if working.id != meeting_id:
                raise MeetingPreconditionError("Meeting id is immutable")
            if (
                current.status == MeetingStatus.PROCESSED
                and working.status != MeetingStatus.PROCESSED
            ):
                raise MeetingPreconditionError(
                    f"Meeting {meeting_id} is already processed"
                )

            self._meetings[meeting_id] = working
            return working.model_copy(deep=True)
