def test_health_reports_backend(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["backend"] == "memory"
    assert body["environment"] == "test"
    assert body["timestamp"]


def test_welcome_lists_endpoints(client):
    body = client.get("/").json()
    assert body["version"] == "1.0.0"
    assert body["endpoints"]["projects"] == "/api/projects"


def test_unknown_route(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Route not found"}
