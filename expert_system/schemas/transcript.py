"""Schemas for acquiring call transcripts."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class TranscriptEntry(BaseModel):
    """A single utterance returned by the transcription provider."""

    speaker: Optional[str] = Field(None, description="Speaker label as reported.")
    text: Optional[str] = Field(None, description="Spoken content.")


class TranscriptFile(BaseModel):
    """An uploaded transcript file carried inline in a JSON body."""

    filename: str = Field(..., description="Original file name including extension.")
    file_b64: str = Field(..., description="Base64-encoded file contents.")


class TranscriptFetchRequest(BaseModel):
    """Request to pull a transcript from a meeting link."""

    meeting_url: str = Field(..., description="Link to the recorded meeting.")
    api_key: Optional[str] = Field(
        None,
        description=(
            "Transcription provider key. Falls back to the stored preference "
            "when omitted; a supplied key is remembered."
        ),
    )


class TranscriptFetchResponse(BaseModel):
    """Flattened transcript ready to be submitted for analysis."""

    meeting_id: str
    transcript: str
    entry_count: int


__all__ = [
    "TranscriptEntry",
    "TranscriptFetchRequest",
    "TranscriptFetchResponse",
    "TranscriptFile",
]
