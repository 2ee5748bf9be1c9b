"""
Drive analysis sessions from form submission to a rendered outcome.

Each session owns a :class:`ViewController`, at most one background polling
task, and the cancellation token for that task.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError

from expert_system.clients import (
    AnalysisServiceClient,
    PollingCancelledError,
    PollingError,
    PreferencesStore,
    SubmissionError,
    TaskFailedError,
)
from expert_system.core.errors import ExpertSystemError
from expert_system.schemas import (
    CONSULTANTS,
    AnalysisMetrics,
    AnalysisReport,
    AnalysisRequest,
    AnalysisSubmission,
    SessionSnapshot,
    TaskStatusResponse,
    ViewState,
)
from expert_system.services.error_hints import friendly_error_message
from expert_system.services.transcript_acquisition import (
    InputValidationError,
    TranscriptAcquisitionService,
    TranscriptSource,
)
from expert_system.services.view_controller import (
    InvalidTransitionError,
    ViewController,
)
from expert_system.utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error while processing the analysis."
CANCELLED_MESSAGE = "Analysis cancelled before completion."
LINKED_TRANSCRIPT_REFERENCE = "Meeting transcript"
DEFAULT_SESSION_TTL_SECONDS = 3600

_METRIC_KEYS = {
    "pages": "paginas",
    "examples": "exemplos",
    "prompts": "prompts",
    "actions": "acoes",
}


class SessionNotFoundError(ExpertSystemError):
    """Raised when a session id is unknown."""


@dataclass(slots=True)
class AnalysisSession:
    controller: ViewController
    cancel_token: Optional[CancellationToken] = None
    runner: Optional[asyncio.Task] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def active(self) -> bool:
        return self.runner is not None and not self.runner.done()

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


def prepare_request(
    submission: AnalysisSubmission,
    acquisition: TranscriptAcquisitionService,
) -> tuple[TranscriptSource, AnalysisRequest]:
    """Validate a form submission without touching the network."""
    if submission.file and submission.transcription:
        raise InputValidationError(
            "Provide either a transcript file or a fetched transcript, not both."
        )
    if submission.file:
        source = acquisition.from_transcript_file(submission.file)
    elif submission.transcription:
        source = acquisition.from_text(
            submission.transcription,
            reference=submission.transcription_reference or LINKED_TRANSCRIPT_REFERENCE,
        )
    else:
        raise InputValidationError(
            "Please upload a transcript file or fetch one from a meeting link."
        )

    if not submission.client_name.strip():
        raise InputValidationError("Please provide the client name.")
    if submission.consultant_name not in CONSULTANTS:
        raise InputValidationError("Please select the responsible consultant.")

    try:
        request = AnalysisRequest(
            transcript_payload=source.payload_b64,
            notes=submission.notes or None,
            client_name=submission.client_name,
            consultant_name=submission.consultant_name,
            reference_date=submission.reference_date,
        )
    except ValidationError as exc:
        raise InputValidationError(str(exc)) from exc
    return source, request


def build_report(
    *,
    request: AnalysisRequest,
    source: TranscriptSource,
    final_status: TaskStatusResponse,
) -> AnalysisReport:
    """Summarize a completed task; metrics missing from the result stay empty."""
    result = final_status.result
    metrics: Dict[str, Optional[int]] = {}
    pdf_url = None
    if isinstance(result, dict):
        for field_name, result_key in _METRIC_KEYS.items():
            metrics[field_name] = _as_int(result.get(result_key))
        pdf_url = result.get("pdf_url") or result.get("output_url")

    return AnalysisReport(
        client_name=request.client_name,
        consultant_name=request.consultant_name,
        processed_at=datetime.now(timezone.utc),
        file_reference=source.reference,
        task_id=final_status.task_id,
        metrics=AnalysisMetrics(**metrics),
        pdf_url=pdf_url,
        raw_result=result,
    )


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class AnalysisSessionManager:
    """In-memory registry of sessions and their background polling tasks.

    Sessions without an in-flight analysis are evicted once they have been
    idle for ``session_ttl_seconds``.
    """

    def __init__(
        self,
        *,
        analysis_client: AnalysisServiceClient,
        acquisition: TranscriptAcquisitionService,
        preferences_store: PreferencesStore,
        poll_interval_seconds: float | None = None,
        session_ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
    ) -> None:
        self._client = analysis_client
        self._acquisition = acquisition
        self._preferences = preferences_store
        self._poll_interval = poll_interval_seconds
        self._ttl = session_ttl_seconds
        self._sessions: Dict[str, AnalysisSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _prune(self) -> None:
        threshold = datetime.now(timezone.utc) - timedelta(seconds=self._ttl)
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if not session.active and session.updated_at < threshold
        ]
        for session_id in expired:
            self.discard(session_id)
        if expired:
            logger.info("Evicted idle analysis sessions", extra={"entries": len(expired)})

    def open_session(self) -> SessionSnapshot:
        self._prune()
        session_id = uuid.uuid4().hex
        session = AnalysisSession(controller=ViewController(session_id))
        self._sessions[session_id] = session
        return session.controller.snapshot()

    def _get(self, session_id: str) -> AnalysisSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Unknown analysis session {session_id}")
        return session

    def get(self, session_id: str) -> SessionSnapshot:
        self._prune()
        return self._get(session_id).controller.snapshot()

    def start(
        self,
        submission: AnalysisSubmission,
        *,
        session_id: str | None = None,
    ) -> SessionSnapshot:
        """Validate ``submission`` and launch its analysis in the background.

        Validation failures raise :class:`InputValidationError` before any
        request is sent. An existing session stays on the form and no new
        session is registered.
        """
        session = self._get(session_id) if session_id is not None else None
        if session is not None and session.controller.state is not ViewState.FORM:
            raise InvalidTransitionError("start an analysis", session.controller.state)
        source, request = prepare_request(submission, self._acquisition)

        if session is None:
            session = self._get(self.open_session().session_id)
        session.controller.start()
        session.touch()
        self._preferences.update(
            client_name=request.client_name,
            consultant_name=request.consultant_name,
        )
        session.cancel_token = CancellationToken()
        session.runner = asyncio.create_task(
            self._run(session, request, source),
            name=f"analysis-{session.controller.session_id}",
        )
        logger.info(
            "Analysis session started",
            extra={"session_id": session.controller.session_id},
        )
        return session.controller.snapshot()

    async def _run(
        self,
        session: AnalysisSession,
        request: AnalysisRequest,
        source: TranscriptSource,
    ) -> None:
        try:
            await self._drive(session.controller, session.cancel_token, request, source)
        finally:
            session.touch()

    async def _drive(
        self,
        controller: ViewController,
        cancel_token: Optional[CancellationToken],
        request: AnalysisRequest,
        source: TranscriptSource,
    ) -> None:
        try:
            handle = await self._client.submit(request)
            controller.attach_task(handle.task_id)
            final_status = await self._client.poll_until_terminal(
                handle.task_id,
                controller.update_progress,
                interval_seconds=self._poll_interval,
                cancel_token=cancel_token,
            )
        except PollingCancelledError:
            controller.fail(CANCELLED_MESSAGE)
            return
        except (SubmissionError, PollingError, TaskFailedError) as exc:
            detail = str(exc)
            logger.warning(
                "Analysis session failed: %s",
                detail,
                extra={"session_id": controller.session_id},
            )
            controller.fail(
                friendly_error_message(detail, UNKNOWN_ERROR_MESSAGE), detail=detail
            )
            return
        except Exception as exc:  # pragma: no cover - unexpected failures
            logger.exception(
                "Unexpected failure while running analysis session",
                extra={"session_id": controller.session_id},
            )
            controller.fail(UNKNOWN_ERROR_MESSAGE, detail=str(exc) or None)
            return

        controller.succeed(
            build_report(request=request, source=source, final_status=final_status)
        )

    async def wait(self, session_id: str) -> SessionSnapshot:
        """Wait for the in-flight analysis of ``session_id`` to settle."""
        session = self._get(session_id)
        if session.runner is not None:
            await asyncio.shield(session.runner)
        return session.controller.snapshot()

    def cancel(self, session_id: str) -> SessionSnapshot:
        """Stop polling for ``session_id``; no further status request is sent.

        The move to the error screen happens once the runner unwinds; await
        :meth:`wait` to observe it.
        """
        session = self._get(session_id)
        if session.cancel_token is not None:
            session.cancel_token.cancel()
        return session.controller.snapshot()

    def retry(self, session_id: str) -> SessionSnapshot:
        session = self._get(session_id)
        session.controller.retry()
        session.touch()
        return session.controller.snapshot()

    def reset(self, session_id: str) -> SessionSnapshot:
        session = self._get(session_id)
        session.controller.new_analysis()
        session.touch()
        return session.controller.snapshot()

    def report(self, session_id: str) -> Optional[AnalysisReport]:
        return self._get(session_id).controller.report

    def discard(self, session_id: str) -> None:
        """Forget ``session_id``, stopping its poll loop if one is running."""
        session = self._sessions.pop(session_id, None)
        if session is not None and session.cancel_token is not None:
            session.cancel_token.cancel()

    async def shutdown(self) -> None:
        """Cancel every in-flight poll loop and wait for them to unwind."""
        runners = []
        for session in self._sessions.values():
            if session.cancel_token is not None:
                session.cancel_token.cancel()
            if session.active:
                runners.append(session.runner)
        if runners:
            await asyncio.gather(*runners, return_exceptions=True)


__all__ = [
    "AnalysisSession",
    "AnalysisSessionManager",
    "CANCELLED_MESSAGE",
    "DEFAULT_SESSION_TTL_SECONDS",
    "SessionNotFoundError",
    "UNKNOWN_ERROR_MESSAGE",
    "build_report",
    "prepare_request",
]
