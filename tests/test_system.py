"""System endpoints and the shared error envelope."""
import redis


def test_api_root(client):
    response = client.get("/api")

    assert response.status_code == 200
    assert response.json()["data"]["endpoints"]["appointments"] == "/api/v1/appointments"
    assert response.json()["data"]["endpoints"]["clinics"] == "/api/v1/clinics"


def test_health_check(client):
    response = client.get("/api/health")

    assert response.json()["data"]["status"] == "healthy"
    assert response.json()["data"]["redis"] == "connected"


def test_health_check_reports_redis_outage(client, redis_client, monkeypatch):
    def refuse():
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(redis_client, "ping", refuse)

    response = client.get("/api/health")

    assert response.json()["data"]["status"] == "degraded"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/v1/nothing-here")

    body = response.json()
    assert response.status_code == 404
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["type"] == "HTTPException"
