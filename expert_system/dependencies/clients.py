"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from expert_system.clients import (
    AnalysisServiceClient,
    PreferencesStore,
    TranscriptionClient,
)
from expert_system.core.config import get_settings
from expert_system.services import (
    AnalysisSessionManager,
    TranscriptAcquisitionService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_analysis_service_client() -> AnalysisServiceClient:
    """Provide the hosted analysis service client."""
    return AnalysisServiceClient(_settings().analysis)


@lru_cache()
def get_transcription_client() -> TranscriptionClient:
    """Provide the meeting transcription provider client."""
    return TranscriptionClient(_settings().transcription)


@lru_cache()
def get_preferences_store() -> PreferencesStore:
    """Provide the remembered form values store."""
    return PreferencesStore(_settings().preferences_db_path)


def get_transcript_acquisition_service() -> TranscriptAcquisitionService:
    """Build the transcript acquisition service."""
    return TranscriptAcquisitionService(
        transcription_client=get_transcription_client(),
        upload_settings=_settings().uploads,
    )


@lru_cache()
def get_session_manager() -> AnalysisSessionManager:
    """Provide the process-wide analysis session registry."""
    return AnalysisSessionManager(
        analysis_client=get_analysis_service_client(),
        acquisition=get_transcript_acquisition_service(),
        preferences_store=get_preferences_store(),
        session_ttl_seconds=_settings().session_ttl_seconds,
    )


__all__ = [
    "get_analysis_service_client",
    "get_preferences_store",
    "get_session_manager",
    "get_transcript_acquisition_service",
    "get_transcription_client",
]
