"""Transcription backends -- produce ordered transcript segments for a meeting.

CorpusTranscriptionBackend stands in for a real speech-to-text service: it
draws utterances from a fixed per-language corpus and lays them out on a
regular timeline. Any backend must return a non-empty ordered sequence with
non-decreasing ``start`` and ``end - start == duration`` for every segment.

Exports:
    TranscriptionBackend: Protocol implemented by all backends.
    CorpusTranscriptionBackend: Fixed-corpus stand-in backend.
    KeywordEntry: Controlled vocabulary entry.
    KEYWORD_VOCABULARY: Controlled vocabulary per language.
    render_full_text: Render segments as "Speaker: text" lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from src.callsnap.meetings.schemas import Meeting, Segment

logger = structlog.get_logger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

FALLBACK_LANGUAGE = "pt-BR"

TRANSCRIPT_CORPUS: dict[str, list[str]] = {
    "pt-BR": [
        "Discussão sobre roadmap do produto e prioridades do trimestre.",
        "Alinhamento com time de vendas sobre feedback dos clientes enterprise.",
        "Definição de próximos passos e responsáveis por cada tarefa chave.",
        "Detalhes técnicos sobre a integração com Google Meet e compliance.",
    ],
    "en-US": [
        "Discussion about the product roadmap and quarter priorities.",
        "Alignment with the sales team on feedback from enterprise customers.",
        "Definition of next steps and owners for each key task.",
        "Technical details about the integration with Google Meet and compliance.",
    ],
}


@dataclass(frozen=True)
class KeywordEntry:
    """Controlled vocabulary term, the root token it matches on, and its topic."""

    term: str
    root: str
    topic: str


KEYWORD_VOCABULARY: dict[str, list[KeywordEntry]] = {
    "pt-BR": [
        KeywordEntry("discussão", "discuss", "Planejamento"),
        KeywordEntry("roadmap", "roadmap", "Planejamento"),
        KeywordEntry("alinhamento", "alinha", "Vendas"),
        KeywordEntry("clientes", "client", "Vendas"),
        KeywordEntry("definição", "defini", "Execução"),
        KeywordEntry("próximos passos", "próxim", "Execução"),
        KeywordEntry("detalhes técnicos", "detalhe", "Tecnologia"),
        KeywordEntry("integração", "integra", "Tecnologia"),
        KeywordEntry("compliance", "compliance", "Tecnologia"),
    ],
    "en-US": [
        KeywordEntry("discussion", "discuss", "Planning"),
        KeywordEntry("roadmap", "roadmap", "Planning"),
        KeywordEntry("alignment", "align", "Sales"),
        KeywordEntry("customers", "customer", "Sales"),
        KeywordEntry("definition", "defini", "Execution"),
        KeywordEntry("next steps", "next", "Execution"),
        KeywordEntry("technical details", "technical", "Technology"),
        KeywordEntry("integration", "integrat", "Technology"),
        KeywordEntry("compliance", "compliance", "Technology"),
    ],
}

SENTIMENT_BY_PARITY = ("positive", "neutral")


def resolve_language(language: str | None) -> str:
    """Map a requested language onto one the corpus supports."""
    if language and language in TRANSCRIPT_CORPUS:
        return language
    return FALLBACK_LANGUAGE


def vocabulary_for(language: str | None) -> list[KeywordEntry]:
    return KEYWORD_VOCABULARY[resolve_language(language)]


def match_leading_word(text: str, vocabulary: list[KeywordEntry]) -> list[str]:
    """Vocabulary terms whose root is contained in the text's leading word."""
    words = text.split()
    if not words:
        return []
    leading = words[0].lower()
    return [entry.term for entry in vocabulary if entry.root in leading]


def render_full_text(segments: list[Segment]) -> str:
    """Render segments as newline-joined "Speaker: text" lines."""
    return "\n".join(f"{s.speaker}: {s.text}" for s in segments)


# ── Backends ─────────────────────────────────────────────────────────────────


class TranscriptionBackend(Protocol):
    """Produces the ordered transcript segments of a meeting."""

    def transcribe(self, meeting: Meeting, language: str | None) -> list[Segment]: ...


class CorpusTranscriptionBackend:
    """Fixed-corpus transcription stand-in.

    Speaker labels rotate over the participant count, each segment lasts
    ``segment_seconds`` and starts ``gap_seconds`` after the previous one
    ends, and sentiment alternates by index parity.

    Args:
        segment_seconds: Duration of every segment.
        gap_seconds: Silence between consecutive segments.
    """

    def __init__(self, segment_seconds: float = 40, gap_seconds: float = 2) -> None:
        if segment_seconds <= 0:
            raise ValueError("segment_seconds must be positive")
        if gap_seconds < 0:
            raise ValueError("gap_seconds must not be negative")
        self._segment_seconds = float(segment_seconds)
        self._gap_seconds = float(gap_seconds)

    def transcribe(self, meeting: Meeting, language: str | None) -> list[Segment]:
        corpus_language = resolve_language(language)
        vocabulary = KEYWORD_VOCABULARY[corpus_language]
        speaker_count = max(1, len(meeting.participants))

        segments: list[Segment] = []
        for index, text in enumerate(TRANSCRIPT_CORPUS[corpus_language]):
            start = segments[-1].end + self._gap_seconds if segments else 0.0
            end = start + self._segment_seconds
            segments.append(
                Segment(
                    id=f"seg-{index + 1}",
                    speaker=f"Speaker {index % speaker_count + 1}",
                    start=start,
                    end=end,
                    duration=end - start,
                    text=text,
                    sentiment=SENTIMENT_BY_PARITY[index % 2],
                    keywords=match_leading_word(text, vocabulary),
                )
            )

        logger.info(
            "transcript_generated",
            meeting_id=meeting.id,
            language=corpus_language,
            segments=len(segments),
        )
        return segments
