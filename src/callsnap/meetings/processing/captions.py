"""Caption builder -- WebVTT track and readability score for a transcript.

A track is the ``WEBVTT`` header followed by one numbered cue per segment::

    1
    00:00:00.000 --> 00:00:40.000
    Speaker 1: Discussion about the product roadmap.

A meeting without segments yields a header-only track.
"""

from __future__ import annotations

import webvtt

from src.callsnap.meetings.schemas import Segment


def format_vtt_timestamp(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm."""
    total_ms = int(round(max(seconds, 0.0) * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def build_captions(segments: list[Segment]) -> str:
    """Render the WebVTT track, one cue per segment numbered from 1."""
    track = webvtt.WebVTT()
    for index, s in enumerate(segments, start=1):
        track.captions.append(
            webvtt.Caption(
                format_vtt_timestamp(s.start),
                format_vtt_timestamp(s.end),
                f"{s.speaker}: {s.text}",
                identifier=str(index),
            )
        )
    return track.content


def readability_score(segments: list[Segment]) -> float:
    """Rough 0-100 readability: shorter utterances and words score higher."""
    words = [word for s in segments for word in s.text.split()]
    if not words:
        return 0.0
    avg_words = len(words) / len(segments)
    avg_word_length = sum(len(word) for word in words) / len(words)
    score = 100 - 2 * avg_words - 5 * (avg_word_length - 4)
    return round(min(100.0, max(0.0, score)), 1)
