"""Summarizer -- named summary variants per style and language.

Each run renders every built-in style from per-language templates keyed off
the meeting title. A requested style that is not built in gets a placeholder
entry, so the style map always holds the requested key. New variants are
merged into the existing map rather than replacing it, which keeps earlier
styles (including a manual ``custom`` one) selectable.

Exports:
    Summarizer: Summary generation service.
    merge_styles: Explicit style map merge.
    apply_manual_summary: Manual override of the active summary.
    is_manual_summary_active: Whether the custom summary is selected.
    BUILTIN_STYLES: Built-in style keys, first one is the fallback.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

import structlog

from src.callsnap.meetings.errors import MeetingValidationError
from src.callsnap.meetings.schemas import Meeting, Summaries

logger = structlog.get_logger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

BUILTIN_STYLES: tuple[str, ...] = ("bullets", "narrative", "tldr")
CUSTOM_STYLE = "custom"
TEMPLATE_FALLBACK_LANGUAGE = "en-US"

SUMMARY_TEMPLATES: dict[str, dict[str, str]] = {
    "pt-BR": {
        "bullets": (
            "{title}\n"
            "• Roadmap do produto e prioridades do trimestre\n"
            "• Feedback dos clientes enterprise com o time de vendas\n"
            "• Próximos passos e responsáveis definidos"
        ),
        "narrative": (
            "{title}: foram discutidos roadmap, feedbacks de clientes e "
            "próximos passos. A CallSnap gerou uma ata automática."
        ),
        "tldr": "TL;DR {title}: roadmap alinhado, feedback de clientes e próximos passos definidos.",
        "placeholder": "{title} ({style}): resumo neste formato ainda não disponível.",
    },
    "en-US": {
        "bullets": (
            "{title}\n"
            "• Product roadmap and quarter priorities\n"
            "• Enterprise customer feedback with the sales team\n"
            "• Next steps and owners defined"
        ),
        "narrative": (
            "{title}: the team discussed the roadmap, customer feedback and "
            "next steps. CallSnap generated the minutes automatically."
        ),
        "tldr": "TL;DR {title}: roadmap aligned, customer feedback reviewed, next steps set.",
        "placeholder": "{title} ({style}): a summary in this style is not available yet.",
    },
}


# ── Module-Level Helpers ─────────────────────────────────────────────────────


def merge_styles(existing: Mapping[str, str], fresh: Mapping[str, str]) -> dict[str, str]:
    """Merge style maps: keys in ``fresh`` override, all others are retained."""
    merged = dict(existing)
    merged.update(fresh)
    return merged


def apply_manual_summary(summaries: Summaries, text: str, now: datetime) -> Summaries:
    """Store ``text`` as the custom style and make it the active summary.

    Raises:
        MeetingValidationError: If the text is empty after trimming.
    """
    if not (text or "").strip():
        raise MeetingValidationError("Summary text must not be empty")
    return summaries.model_copy(
        update={
            "default": text,
            "styles": merge_styles(summaries.styles, {CUSTOM_STYLE: text}),
            "last_edited_at": now,
        }
    )


def is_manual_summary_active(summaries: Summaries) -> bool:
    """True when the selected summary is the manually saved custom one."""
    manual = summaries.styles.get(CUSTOM_STYLE)
    return bool(manual) and summaries.default == manual


def _templates_for(language: str | None) -> dict[str, str]:
    return SUMMARY_TEMPLATES.get(language or "", SUMMARY_TEMPLATES[TEMPLATE_FALLBACK_LANGUAGE])


# ── Summarizer ───────────────────────────────────────────────────────────────


class Summarizer:
    """Generates summary variants for a meeting."""

    def render_styles(
        self,
        title: str,
        requested_style: str | None,
        language: str | None,
        existing: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        """Render all built-in styles plus a placeholder for an unknown request.

        A requested style already present in ``existing`` (such as a manual
        ``custom`` summary) is left alone.
        """
        templates = _templates_for(language)
        styles = {style: templates[style].format(title=title) for style in BUILTIN_STYLES}
        if (
            requested_style
            and requested_style not in styles
            and requested_style not in (existing or {})
        ):
            styles[requested_style] = templates["placeholder"].format(
                title=title, style=requested_style
            )
        return styles

    @staticmethod
    def resolve_style(
        styles: Mapping[str, str],
        requested_style: str | None,
        preferred_style: str | None,
    ) -> str:
        """Requested style if present, else the preferred one, else the first built-in."""
        for candidate in (requested_style, preferred_style):
            if candidate and candidate in styles:
                return candidate
        return BUILTIN_STYLES[0]

    def summarize(
        self,
        meeting: Meeting,
        requested_style: str | None,
        language: str | None,
    ) -> Summaries:
        """Produce the meeting's summaries with ``requested_style`` selected.

        Args:
            meeting: Meeting whose title and existing styles are used.
            requested_style: Style to select; None falls back to the
                meeting's preferred style.
            language: Summary language; unknown languages use en-US templates.

        Returns:
            Summaries with the merged style map and the selected default.
        """
        fresh = self.render_styles(
            meeting.title, requested_style, language, meeting.summaries.styles
        )
        styles = merge_styles(meeting.summaries.styles, fresh)
        style = self.resolve_style(
            styles, requested_style, meeting.settings.preferred_summary_style
        )

        logger.info(
            "summary_generated",
            meeting_id=meeting.id,
            style=style,
            language=language,
            styles=len(styles),
        )
        return Summaries(
            default=styles[style],
            styles=styles,
            language=language,
            last_edited_at=meeting.summaries.last_edited_at,
        )
