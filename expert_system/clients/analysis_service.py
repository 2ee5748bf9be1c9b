"""Client for the hosted multi-agent analysis workflow service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

import httpx

from expert_system.core.config import AnalysisServiceSettings
from expert_system.core.errors import ExpertSystemError, ServiceResponseError
from expert_system.schemas import (
    AnalysisRequest,
    KickoffInputs,
    KickoffPayload,
    KickoffResponse,
    TaskStatus,
    TaskStatusResponse,
)
from expert_system.utils.cancellation import CancellationToken
from expert_system.utils.http import request_or_raise

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TaskStatusResponse], None]

DEFAULT_FAILURE_MESSAGE = "Task failed"


class SubmissionError(ServiceResponseError):
    """Raised when the service refuses a kickoff; ``body`` keeps the raw response."""


class PollingError(ServiceResponseError):
    """Raised when a status check fails; polling stops immediately."""


class TaskFailedError(ExpertSystemError):
    """Raised when the service reports the task as FAILED."""

    def __init__(self, message: str, *, task_id: str | None = None) -> None:
        super().__init__(message)
        self.task_id = task_id


class PollingCancelledError(ExpertSystemError):
    """Raised when the caller cancels an in-flight poll loop."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Polling cancelled for task {task_id}")
        self.task_id = task_id


class AnalysisServiceClient:
    """Submit transcripts for analysis and observe the resulting tasks.

    The client never changes task state itself; every state it reports comes
    from a status read.
    """

    def __init__(
        self,
        settings: AnalysisServiceSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {settings.bearer_token}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.root_url,
            headers=self._headers,
            timeout=self._settings.request_timeout_seconds,
            transport=self._transport,
        )

    async def describe_inputs(self) -> Any:
        """Return the provider-defined schema of accepted inputs."""
        async with self._client() as client:
            response = await request_or_raise(
                client.get,
                "/inputs",
                error_cls=ServiceResponseError,
                action="Failed to get inputs",
            )
        return response.json()

    async def submit(
        self,
        request: AnalysisRequest,
        *,
        webhook_url: str | None = None,
    ) -> KickoffResponse:
        """Start a task for ``request``.

        ``webhook_url`` defaults to the configured one. The service may notify
        it on completion, but the result is only ever read through polling.
        """
        if webhook_url is None and self._settings.webhook_url is not None:
            webhook_url = str(self._settings.webhook_url)

        payload = KickoffPayload(
            inputs=KickoffInputs.from_request(request, webhook_url=webhook_url)
        )
        logger.info(
            "Submitting analysis task",
            extra={"client_name": request.client_name},
        )
        async with self._client() as client:
            response = await request_or_raise(
                client.post,
                "/kickoff",
                json=payload.to_wire(),
                error_cls=SubmissionError,
                action="Failed to kickoff",
            )

        try:
            handle = KickoffResponse.model_validate(response.json())
        except ValueError as exc:
            raise SubmissionError(
                f"Unreadable kickoff response: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc
        logger.info("Analysis task accepted", extra={"task_id": handle.task_id})
        return handle

    async def get_status(self, task_id: str) -> TaskStatusResponse:
        """Read the current snapshot of ``task_id``."""
        async with self._client() as client:
            response = await request_or_raise(
                client.get,
                f"/status/{task_id}",
                error_cls=PollingError,
                action="Failed to get status",
            )
        try:
            return TaskStatusResponse.model_validate(response.json())
        except ValueError as exc:
            raise PollingError(
                f"Unreadable status for task {task_id}: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    async def poll_until_terminal(
        self,
        task_id: str,
        on_progress: Optional[ProgressCallback] = None,
        *,
        interval_seconds: float | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> TaskStatusResponse:
        """Poll at a fixed interval until the task completes or fails.

        ``on_progress`` runs synchronously after every status read, terminal
        ones included. Returns the COMPLETED snapshot; raises
        :class:`TaskFailedError` on FAILED. A status-check failure propagates as
        :class:`PollingError` without retrying. There is no timeout: only
        ``cancel_token`` stops a task that never terminates.
        """
        interval = (
            self._settings.poll_interval_seconds
            if interval_seconds is None
            else interval_seconds
        )
        polls = 0
        while True:
            if cancel_token is not None and cancel_token.cancelled:
                logger.info(
                    "Polling cancelled", extra={"task_id": task_id, "polls": polls}
                )
                raise PollingCancelledError(task_id)

            status = await self.get_status(task_id)
            polls += 1
            if on_progress is not None:
                on_progress(status)

            if status.status is TaskStatus.COMPLETED:
                logger.info(
                    "Analysis task completed", extra={"task_id": task_id, "polls": polls}
                )
                return status
            if status.status is TaskStatus.FAILED:
                message = status.error or DEFAULT_FAILURE_MESSAGE
                logger.warning(
                    "Analysis task failed: %s", message, extra={"task_id": task_id}
                )
                raise TaskFailedError(message, task_id=task_id)

            if cancel_token is None:
                await asyncio.sleep(interval)
            elif await cancel_token.wait(interval):
                logger.info(
                    "Polling cancelled", extra={"task_id": task_id, "polls": polls}
                )
                raise PollingCancelledError(task_id)


__all__ = [
    "AnalysisServiceClient",
    "DEFAULT_FAILURE_MESSAGE",
    "PollingCancelledError",
    "PollingError",
    "ProgressCallback",
    "SubmissionError",
    "TaskFailedError",
]
