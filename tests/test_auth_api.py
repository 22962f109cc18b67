"""API tests for signup, login, token refresh and the current-user endpoint."""


def _signup(client, email="ana@example.com", password="correct-horse-battery"):
    return client.post("/api/v1/auth/signup", json={"email": email, "password": password, "full_name": "Ana"})


def test_signup_and_me(client):
    response = _signup(client)
    assert response.status_code == 201
    tokens = response.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["expires_in"] > 0

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ana@example.com"
    assert me.json()["full_name"] == "Ana"


def test_duplicate_signup_is_conflict(client):
    assert _signup(client).status_code == 201
    assert _signup(client).status_code == 409


def test_short_password_rejected(client):
    assert _signup(client, password="short").status_code == 422


def test_login(client):
    _signup(client)
    ok = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "correct-horse-battery"})
    assert ok.status_code == 200
    assert ok.json()["access_token"]

    bad = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "wrong-password"})
    assert bad.status_code == 401

    unknown = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "whatever-pass"})
    assert unknown.status_code == 401


def test_refresh_rotates_token(client):
    refresh_token = _signup(client).json()["refresh_token"]

    first = client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
    assert first.status_code == 200
    assert first.json()["refresh_token"] != refresh_token

    # The presented token was revoked during rotation
    again = client.post("/api/v1/auth/refresh", headers={"X-Refresh-Token": refresh_token})
    assert again.status_code == 401


def test_logout_revokes_refresh_token(client):
    refresh_token = _signup(client).json()["refresh_token"]

    assert client.post("/api/v1/auth/logout", headers={"X-Refresh-Token": refresh_token}).status_code == 200
    assert client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token}).status_code == 401


def test_protected_routes_need_a_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/availability").status_code == 401
    bogus = {"Authorization": "Bearer not-a-jwt"}
    assert client.get("/api/v1/time-off", headers=bogus).status_code == 401


def test_access_token_cannot_be_used_to_refresh(client):
    access_token = _signup(client).json()["access_token"]
    assert client.post("/api/v1/auth/refresh", json={"refresh_token": access_token}).status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
