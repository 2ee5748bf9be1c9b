"""Client for the third-party meeting transcription provider."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List

import httpx
from pydantic import ValidationError

from expert_system.core.config import TranscriptionSettings
from expert_system.core.errors import ServiceResponseError
from expert_system.schemas import TranscriptEntry
from expert_system.utils.http import request_or_raise

logger = logging.getLogger(__name__)

_MEETING_ID_PATTERN = re.compile(r"meetings/([A-Za-z0-9_-]+)")


class FetchError(ServiceResponseError):
    """Raised when a transcript cannot be obtained from a meeting link."""


def extract_meeting_id(meeting_url: str) -> str:
    """Return the identifier following ``meetings/`` in ``meeting_url``."""
    match = _MEETING_ID_PATTERN.search(meeting_url or "")
    if not match:
        raise FetchError(
            "Invalid meeting link: expected a URL containing 'meetings/<id>'."
        )
    return match.group(1)


def format_transcript(entries: Iterable[TranscriptEntry]) -> str:
    """Flatten utterances into ``speaker: text`` lines."""
    lines: List[str] = []
    for entry in entries:
        text = (entry.text or "").strip()
        if not text:
            continue
        speaker = (entry.speaker or "").strip()
        lines.append(f"{speaker}: {text}" if speaker else text)
    return "\n".join(lines)


class TranscriptionClient:
    """Fetch meeting transcripts using a user-supplied API key."""

    def __init__(
        self,
        settings: TranscriptionSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def fetch_entries(
        self, meeting_url: str, *, api_key: str
    ) -> tuple[str, List[TranscriptEntry]]:
        """Return the meeting id and its utterances.

        The link and the key are checked before any request is issued.
        """
        meeting_id = extract_meeting_id(meeting_url)
        if not api_key or not api_key.strip():
            raise FetchError("A transcription API key is required to fetch transcripts.")

        async with httpx.AsyncClient(
            base_url=self._settings.root_url,
            timeout=self._settings.request_timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await request_or_raise(
                client.get,
                f"/v1/meetings/{meeting_id}/transcript",
                headers={"x-api-key": api_key.strip()},
                error_cls=FetchError,
                action="Failed to fetch transcript",
            )

        try:
            entries = _parse_entries(response.json())
        except (ValueError, ValidationError) as exc:
            raise FetchError(
                f"Unreadable transcript for meeting {meeting_id}: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        if not entries:
            raise FetchError(f"Meeting {meeting_id} has no transcript available.")

        logger.info(
            "Fetched transcript",
            extra={"meeting_id": meeting_id, "entries": len(entries)},
        )
        return meeting_id, entries


def _parse_entries(payload: Any) -> List[TranscriptEntry]:
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        raise ValueError("expected a list of transcript entries")
    return [TranscriptEntry.model_validate(item) for item in payload]


__all__ = [
    "FetchError",
    "TranscriptionClient",
    "extract_meeting_id",
    "format_transcript",
]
