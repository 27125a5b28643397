from iharu.config import settings


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "running"


def test_health_and_version(client):
    assert client.get("/api/v1/health").json() == {"status": "ok"}
    assert client.get("/api/v1/version").json() == {"version": settings.app_version}
    assert client.get("/api/v1/system/ping").json() == {"status": "ok"}


def test_status_requires_auth(client, parent, child):
    r = client.get("/api/v1/system/status", headers=parent["headers"])
    assert r.status_code == 200
    assert r.json()["family_count"] == 1
    assert r.json()["user_count"] == 2
    assert client.get("/api/v1/system/status").status_code in (401, 403)


def test_cors_preflight(client):
    r = client.options(
        "/api/v1/health",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert r.status_code == 200
    assert "access-control-allow-origin" in r.headers
