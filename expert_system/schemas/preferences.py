"""Schemas for the remembered form values."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class UserPreferences(BaseModel):
    """Last-used values, passed explicitly to the components that need them."""

    client_name: Optional[str] = Field(None, description="Last submitted client.")
    consultant_name: Optional[str] = Field(None, description="Last chosen consultant.")
    transcription_api_key: Optional[str] = Field(
        None, description="Transcription provider key, stored in plain text."
    )


__all__ = ["UserPreferences"]
