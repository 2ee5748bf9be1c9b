"""
Schemas describing an analysis session as the front end sees it.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .analysis import NOTES_MAX_LENGTH, TaskStatus
from .transcript import TranscriptFile


class ViewState(str, Enum):
    """The four screens of the front end."""

    FORM = "form"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


class AnalysisSubmission(BaseModel):
    """Raw form contents; checked by the session manager before any network call."""

    file: Optional[TranscriptFile] = Field(
        None, description="Uploaded transcript file."
    )
    transcription: Optional[str] = Field(
        None, description="Transcript text previously fetched from a meeting link."
    )
    transcription_reference: Optional[str] = Field(
        None, description="Meeting link the transcription text came from."
    )
    notes: Optional[str] = Field(None, max_length=NOTES_MAX_LENGTH)
    client_name: str = Field("", description="Client or project name.")
    consultant_name: str = Field("", description="Responsible consultant.")
    reference_date: date = Field(default_factory=date.today)


class AnalysisMetrics(BaseModel):
    """Counters the service may include in its result; absent ones stay empty."""

    pages: Optional[int] = None
    examples: Optional[int] = None
    prompts: Optional[int] = None
    actions: Optional[int] = None


class AnalysisReport(BaseModel):
    """Summary shown once a task completes."""

    client_name: str
    consultant_name: str
    processed_at: datetime
    file_reference: str
    task_id: str
    metrics: AnalysisMetrics = Field(default_factory=AnalysisMetrics)
    pdf_url: Optional[str] = None
    raw_result: Any = None


class ErrorHintPayload(BaseModel):
    category: Literal["format", "timeout", "template", "incomplete"]
    message: str
    tip: str


class PhasePayload(BaseModel):
    index: int
    name: str
    description: str


class SessionSnapshot(BaseModel):
    """Everything needed to render the current screen of a session."""

    session_id: str
    view: ViewState
    task_id: Optional[str] = None
    status: Optional[TaskStatus] = None
    progress: float = 0.0
    phase: Optional[PhasePayload] = None
    error_message: Optional[str] = None
    error_detail: Optional[str] = Field(
        None, description="Raw error text as reported, kept for diagnostics."
    )
    error_hint: Optional[ErrorHintPayload] = None
    report: Optional[AnalysisReport] = None


__all__ = [
    "AnalysisMetrics",
    "AnalysisReport",
    "AnalysisSubmission",
    "ErrorHintPayload",
    "PhasePayload",
    "SessionSnapshot",
    "ViewState",
]
