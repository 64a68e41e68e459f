def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["service"] == "barulogix"
    assert body["env"] == "lab"
    assert body["auth_provider"] == "local"


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "req-abc-123"})
    assert r.headers["X-Request-ID"] == "req-abc-123"

    r = client.get("/health")
    assert r.headers.get("X-Request-ID")


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/no-existe")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"


def test_missing_token_is_401(client):
    r = client.get("/conductors")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"
    assert r.headers.get("WWW-Authenticate") == "Bearer"


def test_garbage_token_is_401(client):
    r = client.get("/conductors", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "TOKEN_INVALID"


def test_validation_error_maps_to_400(client, auth_header):
    r = client.post("/conductors", json={"phone": "123"}, headers=auth_header)
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "INVALID_INPUT"
    assert any(d["field"] == "name" for d in err["details"])


def test_path_param_type_error_maps_to_400(client, auth_header):
    r = client.get("/conductors/abc", headers=auth_header)
    assert r.status_code == 400
