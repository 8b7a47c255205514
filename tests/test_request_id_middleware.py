from __future__ import annotations

from fastapi.testclient import TestClient


def test_preserves_incoming_request_id_header(client: TestClient):
    incoming_id = "test-request-id-123"
    resp = client.get("/api/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client: TestClient):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert isinstance(generated, str)

    duration = resp.headers.get("X-Request-Duration-ms")
    assert duration is not None


def test_request_id_is_echoed_in_error_bodies(client: TestClient):
    resp = client.get("/api/auth/me", headers={"X-Request-ID": "trace-me"})

    assert resp.status_code == 401
    assert resp.json()["error"]["request_id"] == "trace-me"
    assert resp.headers["X-Request-ID"] == "trace-me"


def test_throttled_responses_carry_request_id(client: TestClient):
    for _ in range(5):
        client.post("/api/auth/login", json={"email": "x@example.com", "password": "x"})

    resp = client.post(
        "/api/auth/login",
        json={"email": "x@example.com", "password": "x"},
        headers={"X-Request-ID": "throttled-1"},
    )

    assert resp.status_code == 429
    assert resp.headers["X-Request-ID"] == "throttled-1"
