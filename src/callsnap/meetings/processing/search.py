"""Search indexer and query over transcript segments."""

from __future__ import annotations

from src.callsnap.meetings.errors import MeetingValidationError
from src.callsnap.meetings.schemas import SearchIndexEntry, SearchMatch, Segment


def build_search_index(segments: list[Segment]) -> list[SearchIndexEntry]:
    """Flatten segments into lowercased index entries, in segment order."""
    return [
        SearchIndexEntry(
            segment_id=segment.id,
            text=segment.text.lower(),
            start=segment.start,
            end=segment.end,
        )
        for segment in segments
    ]


def search_index(
    index: list[SearchIndexEntry],
    segments: list[Segment],
    query: str,
) -> list[SearchMatch]:
    """Case-insensitive substring search of the trimmed query.

    Speakers are resolved back from the segments rather than stored in the
    index. Results keep segment order.

    Raises:
        MeetingValidationError: If the query is empty after trimming.
    """
    needle = (query or "").strip().lower()
    if not needle:
        raise MeetingValidationError("Search query must not be empty")

    by_id = {segment.id: segment for segment in segments}
    matches: list[SearchMatch] = []
    for entry in index:
        if needle not in entry.text:
            continue
        segment = by_id.get(entry.segment_id)
        if segment is None:
            continue
        matches.append(
            SearchMatch(
                segment_id=entry.segment_id,
                speaker=segment.speaker,
                start=entry.start,
                end=entry.end,
                text=segment.text,
            )
        )
    return matches
