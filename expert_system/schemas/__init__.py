"""Public schema exports."""

from .analysis import (
    CONSULTANTS,
    AnalysisRequest,
    KickoffInputs,
    KickoffPayload,
    KickoffResponse,
    TaskStatus,
    TaskStatusResponse,
    WebhookAcknowledgement,
)
from .preferences import UserPreferences
from .session import (
    AnalysisMetrics,
    AnalysisReport,
    AnalysisSubmission,
    ErrorHintPayload,
    PhasePayload,
    SessionSnapshot,
    ViewState,
)
from .transcript import (
    TranscriptEntry,
    TranscriptFetchRequest,
    TranscriptFetchResponse,
    TranscriptFile,
)

__all__ = [
    "CONSULTANTS",
    "AnalysisMetrics",
    "AnalysisReport",
    "AnalysisRequest",
    "AnalysisSubmission",
    "ErrorHintPayload",
    "KickoffInputs",
    "KickoffPayload",
    "KickoffResponse",
    "PhasePayload",
    "SessionSnapshot",
    "TaskStatus",
    "TaskStatusResponse",
    "TranscriptEntry",
    "TranscriptFetchRequest",
    "TranscriptFetchResponse",
    "TranscriptFile",
    "UserPreferences",
    "ViewState",
    "WebhookAcknowledgement",
]
