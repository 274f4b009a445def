from tests.helpers import ADMIN, VIEWER, auth_headers


def test_login_success(client, seed_users):
    resp = client.post("/api/admin/auth/login", json={"email": ADMIN})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert "access_token" in body["data"]
    assert body["data"]["user"]["role"] == "admin"


def test_login_is_case_insensitive_and_updates_last_login(client, db, seed_users):
    resp = client.post("/api/admin/auth/login", json={"email": "Admin@Portfolio.dev"})
    assert resp.status_code == 200
    db.refresh(seed_users["admin"])
    assert seed_users["admin"].last_login_at is not None


def test_login_unknown_email(client, seed_users):
    resp = client.post("/api/admin/auth/login", json={"email": "nobody@portfolio.dev"})
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "AUTHENTICATION_ERROR"


def test_login_rejects_unknown_role(client, db, seed_users):
    seed_users["viewer"].role = "guest"
    db.commit()
    resp = client.post("/api/admin/auth/login", json={"email": VIEWER})
    assert resp.status_code == 401


def test_login_missing_email(client):
    resp = client.post("/api/admin/auth/login", json={})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_REQUIRED_FIELDS"


def test_me_authenticated(client, seed_users):
    resp = client.get("/api/admin/auth/me", headers=auth_headers(client, VIEWER))
    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == VIEWER


def test_me_unauthenticated(client):
    resp = client.get("/api/admin/auth/me")
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "AUTHENTICATION_ERROR"


def test_invalid_token(client):
    resp = client.get("/api/admin/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_inactive_user_rejected(client, db, seed_users):
    headers = auth_headers(client, VIEWER)
    seed_users["viewer"].is_active = False
    db.commit()
    resp = client.get("/api/admin/auth/me", headers=headers)
    assert resp.status_code == 401


def test_role_change_invalidates_token(client, db, seed_users):
    headers = auth_headers(client, VIEWER)
    seed_users["viewer"].role = "editor"
    db.commit()
    resp = client.get("/api/admin/auth/me", headers=headers)
    assert resp.status_code == 401


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/admin/nope")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": {"code": "NOT_FOUND", "message": "Not Found"}}


def test_logout(client, seed_users):
    resp = client.post("/api/admin/auth/logout", headers=auth_headers(client, ADMIN))
    assert resp.status_code == 200
    assert resp.json()["message"] == "로그아웃 되었습니다."
