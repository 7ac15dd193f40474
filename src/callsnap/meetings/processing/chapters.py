"""Chapter builder -- one chapter per transcript segment, in segment order."""

from __future__ import annotations

from src.callsnap.meetings.schemas import Chapter, Segment


def build_chapters(segments: list[Segment]) -> list[Chapter]:
    """Map each segment to a chapter titled by its 1-based position."""
    return [
        Chapter(
            id=f"chapter-{segment.id}",
            title=f"Chapter {index + 1}",
            summary=segment.text,
            start=segment.start,
            end=segment.end,
        )
        for index, segment in enumerate(segments)
    ]


def format_timestamp(seconds: float) -> str:
    """Format seconds as MM:SS, the way chapter markers are displayed."""
    total = int(seconds)
    return f"{total // 60:02d}:{total % 60:02d}"
