from __future__ import annotations

from fastapi.testclient import TestClient

from backend.app import app
from backend.auth.users import (
    DuplicateUserError,
    clear_users,
    compare_password,
    create_user,
    find_by_email_or_username,
)

client = TestClient(app)


def _signup(c, username="asha", email="asha@example.com", password="wanderlust1"):
    return c.post("/auth/signup", json={
        "username": username, "email": email, "password": password,
    })


# ── Account store ────────────────────────────────────────────────────────


def test_password_is_hashed_before_storing():
    clear_users()
    record = create_user("ravi", "ravi@example.com", "s3cretpass")
    assert record["password_hash"] != "s3cretpass"
    assert compare_password(record, "s3cretpass")
    assert not compare_password(record, "wrong-pass")


def test_find_by_email_or_username_is_case_insensitive():
    clear_users()
    create_user("Ravi", "Ravi@Example.com", "s3cretpass")
    assert find_by_email_or_username("ravi")["username"] == "Ravi"
    assert find_by_email_or_username("RAVI@example.com")["username"] == "Ravi"
    assert find_by_email_or_username("nobody") is None


def test_create_user_rejects_duplicates():
    clear_users()
    create_user("ravi", "ravi@example.com", "s3cretpass")
    try:
        create_user("other", "RAVI@example.com", "s3cretpass")
    except DuplicateUserError:
        pass
    else:
        raise AssertionError("duplicate email was accepted")


# ── Signup ───────────────────────────────────────────────────────────────


def test_signup_success():
    clear_users()
    resp = _signup(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["user"] == {"username": "asha", "email": "asha@example.com"}
    assert "password_hash" not in resp.text


def test_signup_duplicate_username():
    clear_users()
    _signup(client)
    resp = _signup(client, email="other@example.com")
    assert resp.status_code == 409


def test_signup_validation():
    clear_users()
    assert _signup(client, email="not-an-email").status_code == 400
    assert _signup(client, password="short").status_code == 400
    assert _signup(client, username="a b").status_code == 400


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_with_username():
    clear_users()
    _signup(client)
    resp = client.post("/auth/login", json={"identifier": "asha", "password": "wanderlust1"})
    assert resp.status_code == 200
    assert resp.json()["user"]["username"] == "asha"


def test_login_with_email():
    clear_users()
    _signup(client)
    resp = client.post(
        "/auth/login", json={"identifier": "asha@example.com", "password": "wanderlust1"},
    )
    assert resp.status_code == 200


def test_login_wrong_password():
    clear_users()
    _signup(client)
    resp = client.post("/auth/login", json={"identifier": "asha", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_user():
    clear_users()
    resp = client.post("/auth/login", json={"identifier": "nobody", "password": "x"})
    assert resp.status_code == 401


def test_auth_me_when_logged_in():
    clear_users()
    c = TestClient(app)
    _signup(c)
    c.post("/auth/login", json={"identifier": "asha", "password": "wanderlust1"})
    resp = c.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["username"] == "asha"


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401


def test_logout():
    clear_users()
    c = TestClient(app)
    _signup(c)
    c.post("/auth/login", json={"identifier": "asha", "password": "wanderlust1"})
    resp = c.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "logged_out"
    # Session should be cleared
    resp = c.get("/auth/me")
    assert resp.status_code == 401
