from unittest.mock import AsyncMock, patch


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "VoidBox backend is running."


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "voidbox-api"
    assert body["timestamp"].endswith("Z")


def test_detailed_health_without_databases(client):
    response = client.get("/health/detailed")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_detailed_health(client):
    report = {
        "overall_status": "degraded",
        "databases": {
            "mongodb": {"healthy": True},
            "redis": {"healthy": False, "error": "connection refused"},
        },
    }

    with patch("src.api.routes.health_routes.database_health_check", AsyncMock(return_value=report)):
        response = client.get("/health/detailed")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "degraded"
    assert body["details"]["environment"] == "testing"
    assert body["details"]["telegram_configured"] is True
    assert body["details"]["databases"]["redis"]["healthy"] is False


def test_metrics(client):
    client.get("/health")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["Content-Type"].startswith("text/plain")
    assert "voidbox_service_info" in response.text


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["code"] == "HTTP_404"
