import pytest

from portal.models import Role
from portal.security import TOKEN_COOKIE, get_password_hash


@pytest.fixture
def login_user(make_user):
    return make_user(Role.FINANCE, email="wambui@kechita.co.ke", password_hash=get_password_hash("s3cret-pass"))


def test_login_returns_token_and_sets_cookie(client, login_user):
    resp = client.post("/api/auth/login", data={"username": "Wambui@Kechita.co.ke", "password": "s3cret-pass"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "finance"
    assert resp.cookies.get(TOKEN_COOKIE) == body["access_token"]


def test_bearer_token_identifies_user(client, login_user):
    token = client.post(
        "/api/auth/login", data={"username": "wambui@kechita.co.ke", "password": "s3cret-pass"}
    ).json()["access_token"]
    client.cookies.clear()

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert me.status_code == 200
    assert me.json()["id"] == login_user.id
    assert me.json()["role"] == "finance"


def test_cookie_identifies_user(client, login_user):
    client.post("/api/auth/login", data={"username": "wambui@kechita.co.ke", "password": "s3cret-pass"})

    # El TestClient reenvia la cookie guardada
    assert client.get("/api/auth/me").json()["email"] == "wambui@kechita.co.ke"


@pytest.mark.parametrize("username, password", [
    ("wambui@kechita.co.ke", "wrong-pass"),
    ("nobody@kechita.co.ke", "s3cret-pass"),
])
def test_bad_credentials(client, login_user, username, password):
    resp = client.post("/api/auth/login", data={"username": username, "password": password})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


def test_inactive_user_cannot_use_token(client, db, auth_headers, login_user):
    headers = auth_headers(login_user)
    login_user.is_active = False
    db.commit()

    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_superadmin_manages_users_and_branches(client, auth_headers, make_user, branch, staff):
    admin = make_user(Role.SUPERADMIN)

    resp = client.post("/api/users/", json={
        "email": "New.Teller@kechita.co.ke",
        "full_name": "New Teller",
        "password": "long-enough",
        "role": "staff",
        "branch_id": branch.id,
    }, headers=auth_headers(admin))
    assert resp.status_code == 201
    assert resp.json()["email"] == "new.teller@kechita.co.ke"

    assert client.post("/api/users/", json={
        "email": "new.teller@kechita.co.ke", "password": "long-enough",
    }, headers=auth_headers(admin)).status_code == 400
    assert client.get("/api/users/", headers=auth_headers(staff)).status_code == 403

    resp = client.post("/api/branches/", json={"name": "Kisumu", "region": "Nyanza"}, headers=auth_headers(admin))
    assert resp.status_code == 201
    assert resp.json()["has_float"] is False
    names = [b["name"] for b in client.get("/api/branches/", headers=auth_headers(staff)).json()]
    assert names == ["Kisumu", "Thika"]


def test_branch_listing_flags_configured_float(client, auth_headers, branch, float_config, staff):
    listed = client.get("/api/branches/", headers=auth_headers(staff)).json()

    assert [(b["name"], b["has_float"]) for b in listed] == [("Thika", True)]


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
