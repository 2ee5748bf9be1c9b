"""Service layer exports."""

from .analysis_sessions import (
    AnalysisSessionManager,
    SessionNotFoundError,
    build_report,
    prepare_request,
)
from .error_hints import ErrorHint, friendly_error_message, hint_for_error
from .progress import ANALYSIS_PHASES, AnalysisPhase, current_phase, phase_index
from .transcript_acquisition import (
    InputValidationError,
    TranscriptAcquisitionService,
    TranscriptSource,
)
from .view_controller import InvalidTransitionError, ViewController
from .webhook_sink import handle_raw_delivery, record_delivery

__all__ = [
    "ANALYSIS_PHASES",
    "AnalysisPhase",
    "AnalysisSessionManager",
    "ErrorHint",
    "InputValidationError",
    "InvalidTransitionError",
    "SessionNotFoundError",
    "TranscriptAcquisitionService",
    "TranscriptSource",
    "ViewController",
    "build_report",
    "current_phase",
    "friendly_error_message",
    "handle_raw_delivery",
    "hint_for_error",
    "phase_index",
    "prepare_request",
    "record_delivery",
]
