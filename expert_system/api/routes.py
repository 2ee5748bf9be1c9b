"""
FastAPI routes for the call expert system front end.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from expert_system.clients import FetchError
from expert_system.clients.transcription import extract_meeting_id
from expert_system.core.errors import ServiceResponseError
from expert_system.dependencies import (
    get_analysis_service_client,
    get_preferences_store,
    get_session_manager,
    get_transcript_acquisition_service,
)
from expert_system.schemas import (
    CONSULTANTS,
    AnalysisSubmission,
    SessionSnapshot,
    TranscriptFetchRequest,
    TranscriptFetchResponse,
    UserPreferences,
)
from expert_system.services import (
    InputValidationError,
    InvalidTransitionError,
    SessionNotFoundError,
    handle_raw_delivery,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _session_errors(exc: Exception) -> HTTPException:
    if isinstance(exc, SessionNotFoundError):
        return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc))
    if isinstance(exc, InvalidTransitionError):
        return HTTPException(status_code=HTTPStatus.CONFLICT, detail=str(exc))
    return HTTPException(
        status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc)
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/consultants", status_code=HTTPStatus.OK)
async def list_consultants() -> dict:
    """Consultants selectable on the analysis form."""
    return {"consultants": list(CONSULTANTS)}


@router.get("/analysis/inputs", status_code=HTTPStatus.OK)
async def describe_analysis_inputs(
    analysis_client: Annotated[Any, Depends(get_analysis_service_client)],
) -> Any:
    """Proxy the input schema published by the analysis service."""
    try:
        return await analysis_client.describe_inputs()
    except ServiceResponseError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_GATEWAY, detail=str(exc)) from exc


@router.get("/preferences", response_model=UserPreferences)
async def read_preferences(
    store: Annotated[Any, Depends(get_preferences_store)],
) -> UserPreferences:
    """Return the remembered client, consultant, and transcription key."""
    return store.load()


@router.put("/preferences", response_model=UserPreferences)
async def update_preferences(
    payload: UserPreferences,
    store: Annotated[Any, Depends(get_preferences_store)],
) -> UserPreferences:
    """Remember the supplied values; an empty string forgets a value."""
    return store.update(**payload.model_dump(exclude_none=True))


@router.delete("/preferences", response_model=UserPreferences)
async def clear_preferences(
    store: Annotated[Any, Depends(get_preferences_store)],
) -> UserPreferences:
    store.clear()
    return store.load()


@router.post("/transcripts/fetch", response_model=TranscriptFetchResponse)
async def fetch_transcript(
    payload: TranscriptFetchRequest,
    acquisition: Annotated[Any, Depends(get_transcript_acquisition_service)],
    store: Annotated[Any, Depends(get_preferences_store)],
) -> TranscriptFetchResponse:
    """Pull a transcript from a meeting link using the stored provider key."""
    if payload.api_key and payload.api_key.strip():
        store.update(transcription_api_key=payload.api_key.strip())
    preferences = store.load()

    try:
        extract_meeting_id(payload.meeting_url)
    except FetchError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc)) from exc
    if not preferences.transcription_api_key:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="A transcription API key is required to fetch transcripts.",
        )

    try:
        return await acquisition.fetch_linked(payload.meeting_url, preferences)
    except FetchError as exc:
        raise HTTPException(status_code=HTTPStatus.BAD_GATEWAY, detail=str(exc)) from exc


@router.post(
    "/analyses", response_model=SessionSnapshot, status_code=HTTPStatus.ACCEPTED
)
async def start_analysis(
    payload: AnalysisSubmission,
    manager: Annotated[Any, Depends(get_session_manager)],
    session_id: str | None = Query(
        default=None,
        description="Reuse a session that is back on the form; a new one is opened otherwise.",
    ),
) -> SessionSnapshot:
    """Validate the form and start the analysis in the background."""
    try:
        return manager.start(payload, session_id=session_id)
    except (InputValidationError, SessionNotFoundError, InvalidTransitionError) as exc:
        raise _session_errors(exc) from exc


@router.get("/analyses/{session_id}", response_model=SessionSnapshot)
async def get_analysis(
    session_id: str,
    manager: Annotated[Any, Depends(get_session_manager)],
) -> SessionSnapshot:
    """Current screen of a session, including progress and phase."""
    try:
        return manager.get(session_id)
    except SessionNotFoundError as exc:
        raise _session_errors(exc) from exc


@router.post("/analyses/{session_id}/retry", response_model=SessionSnapshot)
async def retry_analysis(
    session_id: str,
    manager: Annotated[Any, Depends(get_session_manager)],
) -> SessionSnapshot:
    """Leave the error screen and return to the form."""
    try:
        return manager.retry(session_id)
    except (SessionNotFoundError, InvalidTransitionError) as exc:
        raise _session_errors(exc) from exc


@router.post("/analyses/{session_id}/reset", response_model=SessionSnapshot)
async def reset_analysis(
    session_id: str,
    manager: Annotated[Any, Depends(get_session_manager)],
) -> SessionSnapshot:
    """Start a new analysis from a finished session."""
    try:
        return manager.reset(session_id)
    except (SessionNotFoundError, InvalidTransitionError) as exc:
        raise _session_errors(exc) from exc


@router.delete("/analyses/{session_id}", response_model=SessionSnapshot)
async def cancel_analysis(
    session_id: str,
    manager: Annotated[Any, Depends(get_session_manager)],
) -> SessionSnapshot:
    """Stop polling and return the settled session.

    An in-flight analysis has reached the error screen by the time this returns.
    """
    try:
        manager.cancel(session_id)
        return await manager.wait(session_id)
    except SessionNotFoundError as exc:
        raise _session_errors(exc) from exc


@router.get("/analyses/{session_id}/report")
async def download_report(
    session_id: str,
    manager: Annotated[Any, Depends(get_session_manager)],
    redirect: bool = Query(
        default=False,
        description="Redirect to the generated PDF when the service provided one.",
    ),
):
    """Download the raw result as JSON, or follow the PDF link."""
    try:
        report = manager.report(session_id)
    except SessionNotFoundError as exc:
        raise _session_errors(exc) from exc
    if report is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail="Report not available."
        )

    if redirect and report.pdf_url:
        return RedirectResponse(
            url=report.pdf_url, status_code=HTTPStatus.TEMPORARY_REDIRECT
        )

    slug = re.sub(r"[^A-Za-z0-9_-]+", "-", report.client_name).strip("-") or "client"
    stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    return JSONResponse(
        content=report.model_dump(mode="json"),
        headers={
            "Content-Disposition": (
                f'attachment; filename="expert-system-{slug}-{stamp}.json"'
            )
        },
    )


@router.post("/webhooks/analysis")
async def analysis_webhook(request: Request) -> JSONResponse:
    """Acknowledge completion notifications; sessions never wait on them."""
    body = await request.body()
    status_code, content = handle_raw_delivery(body)
    return JSONResponse(status_code=status_code, content=content)


__all__ = ["router"]
