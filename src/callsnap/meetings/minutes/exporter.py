"""ExportRenderer -- downloadable meeting documents.

Assembles a deterministic text document (header, summary, participants,
optional chapters, optional action items, transcript) and wraps it in an
export descriptor. PDF and DOCX requests receive the same text artifact
tagged with the format's MIME type; no binary document rendering happens.

Exports:
    ExportRenderer: Document assembly service.
    MIME_TYPES: Format to MIME type table.
    slugify: File name slug for meeting titles.
"""

from __future__ import annotations

import base64
import re
import unicodedata
from datetime import datetime, timezone

import structlog

from src.callsnap.meetings.errors import MeetingPreconditionError
from src.callsnap.meetings.processing.chapters import format_timestamp
from src.callsnap.meetings.schemas import ExportArtifact, Meeting

logger = structlog.get_logger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

DEFAULT_FORMAT = "txt"
DEFAULT_MIME_TYPE = "text/plain"
DEFAULT_FILE_STEM = "callsnap"

MIME_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "md": "text/markdown",
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "vtt": "text/vtt",
}


def slugify(value: str) -> str:
    """Lowercase ASCII slug with hyphens, e.g. "Sprint Review" -> "sprint-review"."""
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or DEFAULT_FILE_STEM


def resolve_format(format: str | None) -> tuple[str, str]:
    """File extension and MIME type for a requested format; unknown ones map to txt."""
    requested = (format or DEFAULT_FORMAT).strip().lower()
    if requested in MIME_TYPES:
        return requested, MIME_TYPES[requested]
    return DEFAULT_FORMAT, DEFAULT_MIME_TYPE


class ExportRenderer:
    """Builds export artifacts for processed meetings."""

    def render(
        self,
        meeting: Meeting,
        format: str = DEFAULT_FORMAT,
        include_chapters: bool = True,
        include_action_items: bool = True,
        now: datetime | None = None,
    ) -> ExportArtifact:
        """Render the meeting document for ``format``.

        Args:
            meeting: Meeting to export; must have a summary.
            format: Requested format; unknown formats export as plain text.
            include_chapters: Include the chapter list.
            include_action_items: Include the action item list.
            now: Creation timestamp for the descriptor.

        Returns:
            ExportArtifact with descriptor fields and the base64 payload.

        Raises:
            MeetingPreconditionError: If the meeting has no summary yet.
        """
        if not meeting.summary.strip():
            raise MeetingPreconditionError(
                "Transcript and summary must be generated before exporting"
            )

        requested = (format or DEFAULT_FORMAT).strip().lower()
        extension, mime_type = resolve_format(requested)

        content = self.build_document(meeting, include_chapters, include_action_items)
        payload = content.encode("utf-8")

        artifact = ExportArtifact(
            created_at=now or datetime.now(timezone.utc),
            format=requested,
            file_name=f"{slugify(meeting.title)}.{extension}",
            mime_type=mime_type,
            size=len(payload),
            base64=base64.b64encode(payload).decode("ascii"),
        )
        logger.info(
            "export_rendered",
            meeting_id=meeting.id,
            format=requested,
            size=artifact.size,
        )
        return artifact

    def build_document(
        self,
        meeting: Meeting,
        include_chapters: bool = True,
        include_action_items: bool = True,
    ) -> str:
        sections: list[str] = [
            f"{meeting.title}\n{meeting.scheduled_at.isoformat()}",
            f"Summary\n{meeting.summary}",
            "Participants\n"
            + "\n".join(f"- {p.name} <{p.email}>" for p in meeting.participants),
        ]

        if include_chapters and meeting.chapters:
            sections.append(
                "Chapters\n"
                + "\n".join(
                    f"[{format_timestamp(c.start)}] {c.title} - {c.summary}"
                    for c in meeting.chapters
                )
            )

        if include_action_items and meeting.action_items:
            sections.append(
                "Action Items\n" + "\n".join(f"- {item}" for item in meeting.action_items)
            )

        transcript = meeting.transcript.editable_text or meeting.transcript.full_text
        sections.append(f"Transcript\n{transcript}")

        return "\n\n".join(sections) + "\n"
