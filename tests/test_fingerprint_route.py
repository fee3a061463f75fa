"""Tests for the fingerprint reduction and health endpoints."""

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.utils.fingerprint import reduce_signal


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client."""
    return TestClient(app)


def test_fingerprint_returns_same_digest_as_reducer(client: TestClient) -> None:
    signal = "WebGL 1.0|WebKit|WebKit WebGL|WebGL GLSL ES 1.0"

    response = client.post("/fingerprint", json={"signal": signal})

    assert response.status_code == 200
    assert response.json() == {"digest": reduce_signal(signal)}


def test_fingerprint_of_empty_signal(client: TestClient) -> None:
    response = client.post("/fingerprint", json={"signal": ""})

    assert response.json()["digest"] == "0"


def test_fingerprint_requires_signal(client: TestClient) -> None:
    response = client.post("/fingerprint", json={})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "malformed_input"


def test_fingerprint_is_admission_controlled(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_requests", 1)
    headers = {"X-Forwarded-For": "203.0.113.77"}

    first = client.post("/fingerprint", json={"signal": "a"}, headers=headers)
    second = client.post("/fingerprint", json={"signal": "a"}, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 429


def test_health_is_not_rate_limited(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_requests", 1)

    codes = {client.get("/health").status_code for _ in range(5)}

    assert codes == {200}


def test_health_reports_tracked_clients(client: TestClient) -> None:
    client.post("/collect", json={}, headers={"X-Forwarded-For": "203.0.113.1"})
    client.post("/collect", json={}, headers={"X-Forwarded-For": "203.0.113.2"})

    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["rate_limit"]["enabled"] is True
    assert body["rate_limit"]["limit"] == settings.app.rate_limit_requests
    assert body["rate_limit"]["tracked_keys"] == 2
    assert body["rate_limit"]["recorded_admissions"] == 2


def test_openapi_documents_rate_limited_operations(client: TestClient) -> None:
    schema = client.get("/openapi.json").json()

    assert "429" in schema["paths"]["/collect"]["post"]["responses"]
    assert "429" in schema["paths"]["/fingerprint"]["post"]["responses"]
    assert "429" not in schema["paths"]["/health"]["get"]["responses"]
    tag_names = {tag["name"] for tag in schema["tags"]}
    assert {"Telemetry", "Fingerprint", "Health"} <= tag_names
