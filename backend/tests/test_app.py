def test_health_reports_database_readiness(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["readiness"]["database"]["ok"] is True


def test_security_headers_and_request_id(client):
    response = client.get("/", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_metrics_exposes_gate_counters(client):
    client.get("/api/v1/auth/me")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "sewadar_auth_rejections_total" in response.text
    assert "sewadar_http_requests_total" in response.text


def test_error_envelope(client):
    response = client.get("/api/v1/sewadars/")

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Access token required"
    assert body["path"] == "/api/v1/sewadars/"
    assert "timestamp" in body
