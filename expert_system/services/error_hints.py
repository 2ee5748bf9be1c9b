"""
Presentation hints for task errors.

The hosted service returns free text, not error codes, so these hints come from
plain substring matching. They only decorate what the user sees; no control
flow depends on them, and unrelated messages sharing a keyword will match too.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

HintCategory = Literal["format", "timeout", "template", "incomplete"]


@dataclass(frozen=True, slots=True)
class ErrorHint:
    category: HintCategory
    message: str
    tip: str


_HINTS: tuple[tuple[tuple[str, ...], ErrorHint], ...] = (
    (
        ("formato", "format", "reconhecido"),
        ErrorHint(
            category="format",
            message=(
                "Unrecognized file format. Please check that the file is a "
                "valid .docx document."
            ),
            tip="Upload a valid DOCX file containing the transcript.",
        ),
    ),
    (
        ("timeout", "time", "tempo"),
        ErrorHint(
            category="timeout",
            message=(
                "The analysis timed out. The call is very long; consider "
                "splitting it into shorter sessions."
            ),
            tip="Call too long: try splitting it into shorter sessions.",
        ),
    ),
    (
        ("template", "placeholder"),
        ErrorHint(
            category="template",
            message=(
                "Report template placeholder not found. The template needs to "
                "be updated."
            ),
            tip="The report template needs to be updated.",
        ),
    ),
    (
        ("análise", "incompleta", "incomplete"),
        ErrorHint(
            category="incomplete",
            message="The analysis came back incomplete.",
            tip="The transcript may be truncated or unreadable.",
        ),
    ),
)


def hint_for_error(message: str | None) -> Optional[ErrorHint]:
    """Return the first hint whose keywords appear in ``message``, if any."""
    if not message:
        return None
    lowered = message.lower()
    for keywords, hint in _HINTS:
        if any(keyword in lowered for keyword in keywords):
            return hint
    return None


def friendly_error_message(message: str | None, fallback: str) -> str:
    """Hinted message when a keyword matches, else the raw text or ``fallback``."""
    hint = hint_for_error(message)
    if hint is not None:
        return hint.message
    return message or fallback


__all__ = ["ErrorHint", "HintCategory", "friendly_error_message", "hint_for_error"]
