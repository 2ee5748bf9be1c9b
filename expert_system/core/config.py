"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the CLI scripts, and the
webhook function share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()

MEBIBYTE = 1024 * 1024


class AnalysisServiceSettings(BaseSettings):
    """Connection details for the hosted analysis workflow service."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    base_url: AnyHttpUrl = Field(..., validation_alias="ANALYSIS_SERVICE_URL")
    bearer_token: str = Field(..., validation_alias="ANALYSIS_SERVICE_TOKEN")
    poll_interval_seconds: float = Field(
        5.0,
        validation_alias="ANALYSIS_POLL_INTERVAL_SECONDS",
        gt=0,
        description="Fixed delay between two status checks.",
    )
    request_timeout_seconds: float = Field(
        30.0, validation_alias="ANALYSIS_REQUEST_TIMEOUT_SECONDS", gt=0
    )
    webhook_url: Optional[AnyHttpUrl] = Field(
        None,
        validation_alias="ANALYSIS_WEBHOOK_URL",
        description=(
            "Optional completion notification target handed to the service. "
            "Polling never depends on it."
        ),
    )

    @property
    def root_url(self) -> str:
        return str(self.base_url).rstrip("/")


class TranscriptionSettings(BaseSettings):
    """Configuration for the meeting transcription provider."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    base_url: AnyHttpUrl = Field(
        "https://pasta.tldv.io", validation_alias="TRANSCRIPTION_API_URL"
    )
    request_timeout_seconds: float = Field(
        30.0, validation_alias="TRANSCRIPTION_REQUEST_TIMEOUT_SECONDS", gt=0
    )

    @property
    def root_url(self) -> str:
        return str(self.base_url).rstrip("/")


class UploadSettings(BaseSettings):
    """Limits applied to uploaded transcript files."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    allowed_extensions: Annotated[tuple[str, ...], NoDecode] = Field(
        (".docx",), validation_alias="UPLOAD_ALLOWED_EXTENSIONS"
    )
    max_bytes: int = Field(
        50 * MEBIBYTE,
        validation_alias="UPLOAD_MAX_BYTES",
        gt=0,
        description="Largest accepted transcript file, in bytes.",
    )

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def _split_extensions(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing extensions as a comma-separated string."""
        if isinstance(value, str):
            items = [item.strip() for item in value.split(",") if item.strip()]
        else:
            items = list(value)
        return tuple(
            item.lower() if item.startswith(".") else f".{item.lower()}"
            for item in items
        )


class AppSettings(BaseSettings):
    """Root settings object for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    preferences_db_path: str = Field(
        ".expert_system/preferences.db",
        validation_alias="PREFERENCES_DB_PATH",
        description="SQLite file backing the last-used form values.",
    )
    session_ttl_seconds: float = Field(
        3600.0,
        validation_alias="ANALYSIS_SESSION_TTL_SECONDS",
        gt=0,
        description="Idle time after which a settled session is forgotten.",
    )
    analysis: AnalysisServiceSettings = Field(default_factory=AnalysisServiceSettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)
    uploads: UploadSettings = Field(default_factory=UploadSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AnalysisServiceSettings",
    "AppSettings",
    "MEBIBYTE",
    "TranscriptionSettings",
    "UploadSettings",
    "get_settings",
]
