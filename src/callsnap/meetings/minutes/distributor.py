"""MinutesNotifier -- per-participant minutes message previews.

Minutes go to every participant of the meeting. No message transport is
wired in: the notifier computes one preview per participant from the
current summary, chapters and action items and logs it.

Distribution flow:
1. build_previews: one EmailPreview per participant, in participant order
2. dispatch: log each preview and return the list

Exports:
    MinutesNotifier: Main distribution service.
"""

from __future__ import annotations

import structlog

from src.callsnap.meetings.errors import MeetingPreconditionError
from src.callsnap.meetings.schemas import EmailPreview, Meeting, Participant

logger = structlog.get_logger(__name__)


class MinutesNotifier:
    """Builds the minutes messages sent to meeting participants."""

    def build_previews(self, meeting: Meeting) -> list[EmailPreview]:
        """Build one minutes preview per participant.

        Args:
            meeting: Meeting with a generated or manually saved summary.

        Returns:
            EmailPreview list aligned with ``meeting.participants``.

        Raises:
            MeetingPreconditionError: If the meeting has no summary yet.
        """
        if not meeting.summary.strip():
            raise MeetingPreconditionError(
                "Transcript and summary must be generated before sending minutes"
            )
        return [
            EmailPreview(
                to=participant.email,
                subject=f"Minutes: {meeting.title}",
                body=_build_minutes_body(meeting, participant),
            )
            for participant in meeting.participants
        ]

    def dispatch(self, meeting: Meeting) -> list[EmailPreview]:
        """Build the previews and log each one in place of delivery."""
        previews = self.build_previews(meeting)
        for preview in previews:
            logger.info(
                "minutes_preview_logged",
                to=preview.to,
                meeting_id=meeting.id,
                summary_preview=meeting.summary[:200],
            )
        return previews


# ── Message Builders ─────────────────────────────────────────────────────────


def _build_minutes_body(meeting: Meeting, participant: Participant) -> str:
    """Plain-text minutes body for one participant.

    Greeting, summary, chapter titles (comma-joined) and action items
    (pipe-joined).
    """
    chapters = ", ".join(c.title for c in meeting.chapters)
    actions = " | ".join(meeting.action_items)
    return (
        f"Hello {participant.name},\n"
        f"Here are the minutes with the main topics: {meeting.summary}\n"
        f"Chapters: {chapters}\n"
        f"Actions: {actions}"
    )
