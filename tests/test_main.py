import pytest
from httpx import AsyncClient

import app.main as main_module

from conftest import RecordingLogger


@pytest.mark.asyncio
async def test_security_headers_on_every_response(client: AsyncClient) -> None:
    for path in ("/", "/api/academic-year/current", "/api/users/profile"):
        response = await client.get(path)
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert response.headers["referrer-policy"] == "no-referrer"
        assert response.headers["strict-transport-security"].startswith("max-age=")


@pytest.mark.asyncio
async def test_requests_are_logged_in_development(client: AsyncClient, monkeypatch) -> None:
    recorder = RecordingLogger()
    monkeypatch.setattr(main_module, "logger", recorder)

    await client.get("/api/academic-year/current")

    requests = [fields for event, fields in recorder.events if event == "http_request"]
    assert len(requests) == 1
    assert requests[0]["method"] == "GET"
    assert requests[0]["path"] == "/api/academic-year/current"
    assert requests[0]["status"] == 404
    assert requests[0]["duration_ms"] >= 0
