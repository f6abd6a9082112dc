def test_health_skips_security_headers(client):
    response = client.get("/health")
    assert response.json() == {"status": "healthy"}
    assert "X-Frame-Options" not in response.headers


def test_security_headers_on_api_routes(client):
    response = client.get("/")
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store, no-cache, must-revalidate"


def test_public_settings_keep_own_cache_control(client):
    assert client.get("/settings/public").headers["Cache-Control"].startswith("public, max-age=")


def test_validation_errors_are_422_with_details(client):
    response = client.post("/newsletter/subscribe", json={})
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"][-1] == "email"


def test_missing_authorization_is_401(client):
    assert client.get("/profiles/me").status_code == 401
