"""
Pydantic models for the hosted analysis service wire format.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NOTES_MAX_LENGTH = 2000

CONSULTANTS: tuple[str, ...] = (
    "Kimberly Prestes",
    "Lucas Machado",
    "Lucas Dias",
    "Vinicius Galetti",
    "Victor Borrajo",
    "Lucas Silva",
)


class TaskStatus(str, Enum):
    """Lifecycle states reported by the analysis service."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class AnalysisRequest(BaseModel):
    """Everything the analysis service needs to analyse one call."""

    transcript_payload: str = Field(
        ...,
        min_length=1,
        description="Base64-encoded transcript (uploaded file or fetched text).",
    )
    notes: Optional[str] = Field(
        None,
        max_length=NOTES_MAX_LENGTH,
        description="Free-form consultant observations.",
    )
    client_name: str = Field(..., min_length=1)
    consultant_name: str = Field(...)
    reference_date: date = Field(default_factory=date.today)

    @field_validator("client_name")
    @classmethod
    def _require_client_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Client name must not be blank.")
        return cleaned

    @field_validator("consultant_name")
    @classmethod
    def _require_known_consultant(cls, value: str) -> str:
        if value not in CONSULTANTS:
            raise ValueError(f"Unknown consultant: {value!r}")
        return value


class KickoffInputs(BaseModel):
    """The ``inputs`` object of a kickoff call, keyed the way the service expects."""

    model_config = ConfigDict(populate_by_name=True)

    file: str
    notes: Optional[str] = Field(None, alias="observacoes")
    client_name: str = Field(..., alias="cliente")
    consultant_name: str = Field(..., alias="consultor")
    reference_date: str = Field(..., alias="data_ref")
    webhook_url: Optional[str] = None

    @classmethod
    def from_request(
        cls, request: AnalysisRequest, *, webhook_url: str | None = None
    ) -> "KickoffInputs":
        return cls(
            file=request.transcript_payload,
            notes=request.notes or None,
            client_name=request.client_name,
            consultant_name=request.consultant_name,
            reference_date=request.reference_date.isoformat(),
            webhook_url=webhook_url,
        )


class KickoffPayload(BaseModel):
    """Body of ``POST /kickoff``."""

    inputs: KickoffInputs

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class KickoffResponse(BaseModel):
    """Handle returned by the service once a task has been accepted."""

    model_config = ConfigDict(extra="ignore")

    task_id: str
    status: str = "PENDING"


class TaskStatusResponse(BaseModel):
    """Snapshot of a task as returned by ``GET /status/{task_id}``."""

    model_config = ConfigDict(extra="ignore")

    task_id: str
    status: TaskStatus
    result: Any = None
    error: Optional[str] = None
    progress: Optional[float] = Field(None, ge=0, le=100)

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value: Any) -> Any:
        if value is None:
            return None
        return min(max(float(value), 0.0), 100.0)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class WebhookAcknowledgement(BaseModel):
    """Response body returned to the analysis service on webhook delivery."""

    success: bool = True
    message: str = "Webhook processed successfully"


__all__ = [
    "AnalysisRequest",
    "CONSULTANTS",
    "KickoffInputs",
    "KickoffPayload",
    "KickoffResponse",
    "NOTES_MAX_LENGTH",
    "TaskStatus",
    "TaskStatusResponse",
    "WebhookAcknowledgement",
]
