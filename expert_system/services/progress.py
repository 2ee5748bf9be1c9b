"""Map reported task progress onto the named phases shown while processing."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True, slots=True)
class AnalysisPhase:
    name: str
    description: str


ANALYSIS_PHASES: tuple[AnalysisPhase, ...] = (
    AnalysisPhase("Expert Analyst", "processing transcript..."),
    AnalysisPhase("Decision Maker", "defining artifacts..."),
    AnalysisPhase("Generator", "creating practical examples..."),
    AnalysisPhase("Writer", "consolidating content..."),
    AnalysisPhase("Documenter", "generating PDF..."),
    AnalysisPhase("Validator", "approving final delivery..."),
)


def phase_index(progress: float | None, phase_count: int = len(ANALYSIS_PHASES)) -> int:
    """Zero-based phase for ``progress`` (0-100): ``floor(progress / 100 * count)``.

    The result is clamped to ``[0, phase_count - 1]`` so 100% stays on the last
    phase. Display only; nothing is scheduled from it.
    """
    if phase_count <= 0:
        raise ValueError("phase_count must be positive")
    value = progress or 0.0
    index = math.floor(value / 100 * phase_count)
    return min(max(index, 0), phase_count - 1)


def current_phase(
    progress: float | None,
    phases: Sequence[AnalysisPhase] = ANALYSIS_PHASES,
) -> tuple[int, AnalysisPhase]:
    index = phase_index(progress, len(phases))
    return index, phases[index]


__all__ = ["ANALYSIS_PHASES", "AnalysisPhase", "current_phase", "phase_index"]
