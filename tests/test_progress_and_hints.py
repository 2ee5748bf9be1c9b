"""Tests for the processing phases and the error presentation hints."""

from __future__ import annotations

import pytest

from expert_system.services import (
    ANALYSIS_PHASES,
    current_phase,
    friendly_error_message,
    hint_for_error,
    phase_index,
)


@pytest.mark.parametrize(
    ("progress", "expected"),
    [
        (None, 0),
        (0, 0),
        (16.6, 0),
        (16.7, 1),
        (55, 3),
        (99.9, 5),
        (100, 5),
        (150, 5),
        (-10, 0),
    ],
)
def test_phase_index_floors_and_clamps(progress, expected) -> None:
    assert phase_index(progress) == expected


def test_phase_index_requires_phases() -> None:
    with pytest.raises(ValueError):
        phase_index(50, 0)


def test_current_phase_returns_named_phase() -> None:
    index, phase = current_phase(55)

    assert index == 3
    assert phase is ANALYSIS_PHASES[3]
    assert phase.name == "Writer"
    assert len(ANALYSIS_PHASES) == 6


@pytest.mark.parametrize(
    ("message", "category"),
    [
        ("Formato de arquivo não reconhecido", "format"),
        ("Invalid FORMAT in upload", "format"),
        ("Timeout after 600s", "timeout"),
        ("Tempo esgotado", "timeout"),
        ("Placeholder {{cliente}} missing", "template"),
        ("Análise incompleta", "incomplete"),
    ],
)
def test_hint_matches_keywords_case_insensitively(message, category) -> None:
    hint = hint_for_error(message)

    assert hint is not None
    assert hint.category == category


def test_hint_returns_none_for_unknown_messages() -> None:
    assert hint_for_error("Connection refused") is None
    assert hint_for_error(None) is None
    assert hint_for_error("") is None


def test_friendly_message_prefers_hint_then_raw_then_fallback() -> None:
    assert friendly_error_message("Timeout", "fallback").startswith("The analysis timed out")
    assert friendly_error_message("Connection refused", "fallback") == "Connection refused"
    assert friendly_error_message(None, "fallback") == "fallback"
