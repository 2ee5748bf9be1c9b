try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import asyncio
import base64

import httpx
import pytest

from expert_system.clients import PreferencesStore, TranscriptionClient
from expert_system.core.config import TranscriptionSettings, UploadSettings
from expert_system.main import app
from expert_system.services import AnalysisSessionManager, TranscriptAcquisitionService
from expert_system.services.analysis_sessions import CANCELLED_MESSAGE

pytestmark = pytest.mark.anyio

MEETING_URL = "https://tldv.io/app/meetings/meeting-42"


class TranscriptProvider:
    def __init__(self) -> None:
        self.status_code = 200
        self.entries = [
            {"speaker": "Ana", "text": "Kickoff of the rollout."},
            {"speaker": "Bruno", "text": "Agreed."},
        ]
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="provider down")
        return httpx.Response(200, json=self.entries)


@pytest.fixture()
def provider() -> TranscriptProvider:
    return TranscriptProvider()


@pytest.fixture()
def poll_interval() -> float:
    return 0


@pytest.fixture()
def overrides(tmp_path, analysis_client, provider, poll_interval):
    from expert_system import dependencies

    store = PreferencesStore(str(tmp_path / "preferences.db"))
    acquisition = TranscriptAcquisitionService(
        transcription_client=TranscriptionClient(
            TranscriptionSettings(),
            transport=httpx.MockTransport(provider.handler),
        ),
        upload_settings=UploadSettings(),
    )
    manager = AnalysisSessionManager(
        analysis_client=analysis_client,
        acquisition=acquisition,
        preferences_store=store,
        poll_interval_seconds=poll_interval,
    )

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_analysis_service_client: lambda: analysis_client,
            dependencies.get_preferences_store: lambda: store,
            dependencies.get_transcript_acquisition_service: lambda: acquisition,
            dependencies.get_session_manager: lambda: manager,
        }
    )
    try:
        yield {"store": store, "manager": manager}
    finally:
        app.dependency_overrides.clear()


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


def _form(**overrides) -> dict:
    body = {
        "file": {
            "filename": "call.docx",
            "file_b64": base64.b64encode(b"docx-bytes").decode("ascii"),
        },
        "notes": "Focus on onboarding.",
        "client_name": "Acme Corp",
        "consultant_name": "Kimberly Prestes",
        "reference_date": "2024-05-17",
    }
    body.update(overrides)
    return body


async def test_health_and_consultants(overrides):
    async with _client() as client:
        health = await client.get("/api/health")
        consultants = await client.get("/api/consultants")

    assert health.json() == {"status": "ok"}
    assert "Lucas Dias" in consultants.json()["consultants"]
    assert len(consultants.json()["consultants"]) == 6


async def test_analysis_inputs_are_proxied(overrides):
    async with _client() as client:
        response = await client.get("/api/analysis/inputs")

    assert response.status_code == 200
    assert response.json() == {"inputs": ["file", "cliente", "consultor"]}


async def test_full_analysis_flow_to_report(overrides, analysis_service):
    analysis_service.statuses = [
        {"task_id": "task-1", "status": "RUNNING", "progress": 40},
        {
            "task_id": "task-1",
            "status": "COMPLETED",
            "progress": 100,
            "result": {"paginas": 9, "pdf_url": "https://files.example.com/r.pdf"},
        },
    ]

    async with _client() as client:
        started = await client.post("/api/analyses", json=_form())
        assert started.status_code == 202
        session_id = started.json()["session_id"]
        assert started.json()["view"] == "processing"

        await overrides["manager"].wait(session_id)

        current = await client.get(f"/api/analyses/{session_id}")
        report = await client.get(f"/api/analyses/{session_id}/report")
        redirect = await client.get(
            f"/api/analyses/{session_id}/report", params={"redirect": "true"}
        )
        reset = await client.post(f"/api/analyses/{session_id}/reset")

    assert current.json()["view"] == "success"
    assert current.json()["report"]["metrics"]["pages"] == 9

    assert report.status_code == 200
    disposition = report.headers["content-disposition"]
    assert 'filename="expert-system-Acme-Corp-' in disposition
    assert report.json()["task_id"] == "task-1"

    assert redirect.status_code == 307
    assert redirect.headers["location"] == "https://files.example.com/r.pdf"

    assert reset.json()["view"] == "form"
    assert analysis_service.kickoff_bodies[0]["inputs"]["consultor"] == "Kimberly Prestes"


async def test_invalid_form_is_rejected_without_kickoff(overrides, analysis_service):
    async with _client() as client:
        response = await client.post("/api/analyses", json=_form(client_name=""))

    assert response.status_code == 422
    assert analysis_service.requests == []


async def test_failed_analysis_can_be_retried(overrides, analysis_service):
    analysis_service.statuses = [
        {"task_id": "task-1", "status": "FAILED", "error": "Formato inválido"},
    ]

    async with _client() as client:
        session_id = (await client.post("/api/analyses", json=_form())).json()[
            "session_id"
        ]
        await overrides["manager"].wait(session_id)

        current = await client.get(f"/api/analyses/{session_id}")
        missing_report = await client.get(f"/api/analyses/{session_id}/report")
        retried = await client.post(f"/api/analyses/{session_id}/retry")
        retried_again = await client.post(f"/api/analyses/{session_id}/retry")

    body = current.json()
    assert body["view"] == "error"
    assert body["error_hint"]["category"] == "format"
    assert body["error_detail"] == "Formato inválido"
    assert missing_report.status_code == 404
    assert retried.json()["view"] == "form"
    assert retried_again.status_code == 409


async def test_unknown_session_returns_404(overrides):
    async with _client() as client:
        response = await client.get("/api/analyses/does-not-exist")

    assert response.status_code == 404


async def test_preferences_round_trip(overrides):
    async with _client() as client:
        updated = await client.put(
            "/api/preferences",
            json={"client_name": "Acme Corp", "transcription_api_key": "key-1"},
        )
        cleared_key = await client.put(
            "/api/preferences", json={"transcription_api_key": ""}
        )
        read_back = await client.get("/api/preferences")
        deleted = await client.delete("/api/preferences")

    assert updated.json()["transcription_api_key"] == "key-1"
    assert cleared_key.json()["transcription_api_key"] is None
    assert read_back.json()["client_name"] == "Acme Corp"
    assert deleted.json() == {
        "client_name": None,
        "consultant_name": None,
        "transcription_api_key": None,
    }


async def test_fetch_transcript_remembers_key(overrides, provider):
    async with _client() as client:
        response = await client.post(
            "/api/transcripts/fetch",
            json={"meeting_url": MEETING_URL, "api_key": "key-1"},
        )

    assert response.status_code == 200
    assert response.json() == {
        "meeting_id": "meeting-42",
        "transcript": "Ana: Kickoff of the rollout.\nBruno: Agreed.",
        "entry_count": 2,
    }
    assert provider.requests[0].headers["x-api-key"] == "key-1"
    assert overrides["store"].load().transcription_api_key == "key-1"


async def test_fetch_transcript_validates_before_calling_provider(overrides, provider):
    async with _client() as client:
        bad_link = await client.post(
            "/api/transcripts/fetch",
            json={"meeting_url": "https://example.com/video/1", "api_key": "key-1"},
        )
        overrides["store"].clear()
        missing_key = await client.post(
            "/api/transcripts/fetch", json={"meeting_url": MEETING_URL}
        )

    assert bad_link.status_code == 400
    assert missing_key.status_code == 400
    assert provider.requests == []


async def test_fetch_transcript_reports_provider_failure(overrides, provider):
    provider.status_code = 503

    async with _client() as client:
        response = await client.post(
            "/api/transcripts/fetch",
            json={"meeting_url": MEETING_URL, "api_key": "key-1"},
        )

    assert response.status_code == 502
    assert "provider down" in response.json()["detail"]


async def test_webhook_acknowledges_json_and_rejects_garbage(overrides):
    async with _client() as client:
        ok = await client.post(
            "/api/webhooks/analysis", json={"task_id": "task-1", "status": "COMPLETED"}
        )
        broken = await client.post(
            "/api/webhooks/analysis",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

    assert ok.status_code == 200
    assert ok.json() == {"success": True, "message": "Webhook processed successfully"}
    assert broken.status_code == 500
    assert "error" in broken.json()


async def test_fetch_transcript_counts_provider_entries(overrides, provider):
    provider.entries = [
        {"speaker": "Ana", "text": "First point.\nSecond point."},
        {"speaker": "Bruno", "text": ""},
    ]

    async with _client() as client:
        response = await client.post(
            "/api/transcripts/fetch",
            json={"meeting_url": MEETING_URL, "api_key": "key-1"},
        )

    body = response.json()
    assert body["transcript"] == "Ana: First point.\nSecond point."
    assert body["entry_count"] == 2


@pytest.mark.parametrize("poll_interval", [60])
async def test_cancel_returns_the_error_screen(
    overrides, analysis_service, poll_interval
):
    analysis_service.statuses = [{"task_id": "task-1", "status": "RUNNING"}]

    async with _client() as client:
        session_id = (await client.post("/api/analyses", json=_form())).json()[
            "session_id"
        ]
        for _ in range(200):
            if analysis_service.status_calls:
                break
            await asyncio.sleep(0.01)

        cancelled = await client.delete(f"/api/analyses/{session_id}")

    assert cancelled.status_code == 200
    assert cancelled.json()["view"] == "error"
    assert cancelled.json()["error_message"] == CANCELLED_MESSAGE
    assert analysis_service.status_calls == 1
