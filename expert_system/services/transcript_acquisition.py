"""
Turn an uploaded file or a meeting link into a transcript payload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Literal

from expert_system.clients.transcription import (
    FetchError,
    TranscriptionClient,
    format_transcript,
)
from expert_system.core.config import MEBIBYTE, UploadSettings
from expert_system.core.errors import ExpertSystemError
from expert_system.schemas import (
    TranscriptFetchResponse,
    TranscriptFile,
    UserPreferences,
)
from expert_system.utils.encoding import (
    decode_base64,
    encode_file_to_base64,
    encode_text_to_base64,
)

logger = logging.getLogger(__name__)


class InputValidationError(ExpertSystemError):
    """Raised for unusable input; nothing has been sent over the network."""


@dataclass(frozen=True, slots=True)
class TranscriptSource:
    """A transcript ready for submission, with a label for the report."""

    origin: Literal["file", "link"]
    reference: str
    payload_b64: str


class TranscriptAcquisitionService:
    """Validate uploads and fetch linked transcripts."""

    def __init__(
        self,
        *,
        transcription_client: TranscriptionClient,
        upload_settings: UploadSettings,
    ) -> None:
        self._transcription = transcription_client
        self._uploads = upload_settings

    def validate_upload(self, filename: str, size: int) -> None:
        """Check extension and size only; the content is never inspected."""
        extension = PurePath(filename or "").suffix.lower()
        if extension not in self._uploads.allowed_extensions:
            accepted = ", ".join(self._uploads.allowed_extensions)
            raise InputValidationError(
                f"Unsupported file type for {filename!r}; accepted: {accepted}."
            )
        if size > self._uploads.max_bytes:
            limit_mib = self._uploads.max_bytes / MEBIBYTE
            raise InputValidationError(
                f"File too large: maximum size is {limit_mib:g} MiB."
            )

    def from_upload(self, filename: str, content: bytes) -> TranscriptSource:
        self.validate_upload(filename, len(content))
        if not content:
            raise InputValidationError(f"File {filename!r} is empty.")
        return TranscriptSource(
            origin="file",
            reference=filename,
            payload_b64=encode_file_to_base64(content),
        )

    def from_transcript_file(self, upload: TranscriptFile) -> TranscriptSource:
        """Variant of :meth:`from_upload` for files carried as base64 in JSON."""
        try:
            content = decode_base64(upload.file_b64)
        except ValueError as exc:
            raise InputValidationError(
                f"File {upload.filename!r} is not valid base64."
            ) from exc
        return self.from_upload(upload.filename, content)

    def from_text(self, transcript: str, *, reference: str) -> TranscriptSource:
        if not transcript or not transcript.strip():
            raise InputValidationError("Transcript text is empty.")
        return TranscriptSource(
            origin="link",
            reference=reference,
            payload_b64=encode_text_to_base64(transcript),
        )

    async def fetch_linked(
        self, meeting_url: str, preferences: UserPreferences
    ) -> TranscriptFetchResponse:
        """Fetch ``meeting_url`` with the stored credential.

        ``entry_count`` is the number of utterances the provider returned, which
        can differ from the number of rendered lines.
        """
        api_key = preferences.transcription_api_key or ""
        meeting_id, entries = await self._transcription.fetch_entries(
            meeting_url, api_key=api_key
        )
        transcript = format_transcript(entries)
        if not transcript:
            raise FetchError(f"Meeting {meeting_id} has no transcript available.")
        return TranscriptFetchResponse(
            meeting_id=meeting_id,
            transcript=transcript,
            entry_count=len(entries),
        )

    async def fetch_linked_transcript(
        self, meeting_url: str, preferences: UserPreferences
    ) -> str:
        """Flat transcript text of ``meeting_url``."""
        fetched = await self.fetch_linked(meeting_url, preferences)
        return fetched.transcript

    async def from_link(
        self, meeting_url: str, preferences: UserPreferences
    ) -> TranscriptSource:
        transcript = await self.fetch_linked_transcript(meeting_url, preferences)
        logger.info("Acquired transcript from meeting link")
        return self.from_text(transcript, reference=meeting_url)


__all__ = [
    "InputValidationError",
    "TranscriptAcquisitionService",
    "TranscriptSource",
]
