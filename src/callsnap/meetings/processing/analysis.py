"""Analysis engine -- meeting-level sentiment, topics, keywords and follow-ups.

The verdict is a fixed-confidence placeholder for a real classifier, but it
is deterministic for a given segment text: keywords are the controlled
vocabulary terms whose root token appears in the concatenated transcript,
and topics are the distinct topics of those terms.
"""

from __future__ import annotations

from collections import Counter

from src.callsnap.meetings.processing.transcription import (
    resolve_language,
    vocabulary_for,
)
from src.callsnap.meetings.schemas import Analysis, Segment

# ── Constants ────────────────────────────────────────────────────────────────

ANALYSIS_CONFIDENCE = 0.82
NEUTRAL_SENTIMENT = "neutral"
HIGHLIGHT_COUNT = 3

ACTION_ITEM_CORPUS: dict[str, list[str]] = {
    "pt-BR": [
        "Preparar protótipo da extensão Chrome até sexta-feira.",
        "Validar API de transcrição com amostra bilingue.",
        "Criar template de ata em Português e Inglês.",
        "Agendar testes com usuários beta na próxima semana.",
    ],
    "en-US": [
        "Prepare the Chrome extension prototype by Friday.",
        "Validate the transcription API with a bilingual sample.",
        "Create a minutes template in Portuguese and English.",
        "Schedule tests with beta users next week.",
    ],
}


def analyze(segments: list[Segment], language: str | None = None) -> Analysis:
    """Compute the meeting-level analysis from the full segment set."""
    if not segments:
        return Analysis(sentiment=NEUTRAL_SENTIMENT, score=0.0)

    # most_common keeps first-seen order on ties
    sentiment = Counter(s.sentiment for s in segments).most_common(1)[0][0]

    text = " ".join(s.text for s in segments).lower()
    matched = [entry for entry in vocabulary_for(language) if entry.root in text]

    topics: list[str] = []
    for entry in matched:
        if entry.topic not in topics:
            topics.append(entry.topic)

    return Analysis(
        sentiment=sentiment,
        score=ANALYSIS_CONFIDENCE,
        topics=topics,
        keywords=[entry.term for entry in matched],
    )


def derive_highlights(segments: list[Segment]) -> list[str]:
    return [s.text for s in segments[:HIGHLIGHT_COUNT]]


def derive_action_items(segments: list[Segment], language: str | None = None) -> list[str]:
    """Follow-up actions for the run; none when nothing was transcribed."""
    if not segments:
        return []
    return list(ACTION_ITEM_CORPUS[resolve_language(language)])
