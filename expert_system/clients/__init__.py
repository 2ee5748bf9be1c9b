"""Expose constructed client wrappers."""

from .analysis_service import (
    AnalysisServiceClient,
    PollingCancelledError,
    PollingError,
    SubmissionError,
    TaskFailedError,
)
from .preferences_store import PreferencesStore
from .transcription import FetchError, TranscriptionClient

__all__ = [
    "AnalysisServiceClient",
    "FetchError",
    "PollingCancelledError",
    "PollingError",
    "PreferencesStore",
    "SubmissionError",
    "TaskFailedError",
    "TranscriptionClient",
]
