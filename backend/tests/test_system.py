def test_root_is_plain_text(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.data == b"Server is running just fine!"
    assert resp.mimetype == "text/plain"


def test_health_reports_collaborators(client, db_session):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json["status"] == "healthy"
    assert resp.json["checks"]["identity_provider"]["configured"] is True
    assert resp.json["checks"]["payment_provider"]["configured"] is True


def test_version(client):
    resp = client.get("/version")
    assert resp.json["api_version"] == "1.0.0"
    assert "STRIPE" not in resp.get_data(as_text=True)


def test_unknown_route_is_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json["code"] == "NOT_FOUND"


def test_cors_for_configured_origin(client):
    resp = client.get("/", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert "PATCH" in resp.headers["Access-Control-Allow-Methods"]


def test_cors_ignores_other_origins(client):
    resp = client.get("/", headers={"Origin": "https://evil.example.com"})
    assert "Access-Control-Allow-Origin" not in resp.headers
