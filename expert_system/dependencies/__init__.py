"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_analysis_service_client,
    get_preferences_store,
    get_session_manager,
    get_transcript_acquisition_service,
    get_transcription_client,
)

__all__ = [
    "get_analysis_service_client",
    "get_preferences_store",
    "get_session_manager",
    "get_transcript_acquisition_service",
    "get_transcription_client",
]
