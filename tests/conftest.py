"""Pytest configuration shared across the suite."""

from __future__ import annotations

import json
from typing import Any

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from expert_system.clients import AnalysisServiceClient
from expert_system.core.config import AnalysisServiceSettings

ANALYSIS_BASE_URL = "https://analysis.example.com"


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


class FakeAnalysisService:
    """Scripted stand-in for the hosted analysis service."""

    def __init__(self) -> None:
        self.kickoff_response: tuple[int, Any] = (
            200,
            {"task_id": "task-1", "status": "PENDING"},
        )
        self.statuses: list[Any] = []
        self.kickoff_bodies: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []

    @property
    def status_calls(self) -> int:
        return sum(1 for request in self.requests if request.url.path.startswith("/status/"))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/kickoff":
            self.kickoff_bodies.append(json.loads(request.content))
            status_code, body = self.kickoff_response
            if isinstance(body, str):
                return httpx.Response(status_code, text=body)
            return httpx.Response(status_code, json=body)
        if request.method == "GET" and path.startswith("/status/"):
            if not self.statuses:
                raise AssertionError(f"Unexpected extra status poll: {path}")
            item = self.statuses.pop(0)
            if isinstance(item, httpx.Response):
                return item
            if isinstance(item, Exception):
                raise item
            return httpx.Response(200, json=item)
        if request.method == "GET" and path == "/inputs":
            return httpx.Response(200, json={"inputs": ["file", "cliente", "consultor"]})
        return httpx.Response(404, json={"detail": "not found"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def analysis_settings() -> AnalysisServiceSettings:
    return AnalysisServiceSettings(
        base_url=ANALYSIS_BASE_URL,
        bearer_token="test-bearer-token",
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def analysis_service() -> FakeAnalysisService:
    return FakeAnalysisService()


@pytest.fixture
def analysis_client(
    analysis_settings: AnalysisServiceSettings,
    analysis_service: FakeAnalysisService,
) -> AnalysisServiceClient:
    return AnalysisServiceClient(
        analysis_settings, transport=analysis_service.transport()
    )
