"""Tests for the operator statistics endpoint."""

from fastapi.testclient import TestClient


def _login(client: TestClient, email: str) -> dict[str, str]:
    resp = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert resp.status_code == 200
    token = resp.headers["set-cookie"].split(";")[0].partition("=")[2]
    return {"Cookie": f"auth_session={token}"}


def test_admin_sees_store_sizes(client: TestClient) -> None:
    cookie = _login(client, "admin@example.com")

    resp = client.get("/api/admin/stats", headers=cookie)

    assert resp.status_code == 200
    body = resp.json()
    assert body["sessions"] == 1
    assert set(body["limiters"]) == {"general", "api", "auth"}
    assert body["limiters"]["auth"] == {"limit": 5, "window_seconds": 60, "tracked_keys": 1}
    assert body["limiters"]["api"]["tracked_keys"] == 1


def test_regular_user_is_forbidden(client: TestClient) -> None:
    cookie = _login(client, "user@example.com")

    resp = client.get("/api/admin/stats", headers=cookie)

    assert resp.status_code == 403
    error = resp.json()["error"]
    assert error["code"] == "forbidden"
    assert error["details"] == {"required_role": "admin"}


def test_anonymous_is_unauthenticated(client: TestClient) -> None:
    resp = client.get("/api/admin/stats")

    assert resp.status_code == 401
