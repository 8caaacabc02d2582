"""
Authentication tests.

Verifies:
- Signup validation (password length, duplicates)
- Login by username or email returns a bearer token
- Protected endpoints return 401 without a valid token
- Logout revokes the token
"""

from datetime import timedelta

import pytest

from conftest import TEST_PASSWORD, get_auth_token
from sweetshop.models import SessionToken
from sweetshop.services import session_service


class TestSignup:

    def test_short_password_rejected(self, client, db_session):
        resp = client.post("/api/auth/signup", json={
            "username": "shorty", "email": "shorty@sweetshop.test", "password": "1234567",
        })
        assert resp.status_code == 400
        assert "8 characters" in resp.get_json()["error"]

    def test_duplicate_rejected(self, client, auth_headers):
        resp = client.post("/api/auth/signup", json={
            "username": "counter", "email": "other@sweetshop.test", "password": TEST_PASSWORD,
        })
        assert resp.status_code == 400

    def test_password_is_hashed(self, client, db_session):
        resp = client.post("/api/auth/signup", json={
            "username": "baker", "email": "Baker@SweetShop.test", "password": TEST_PASSWORD,
        })
        assert resp.status_code == 201
        user = resp.get_json()["user"]
        assert user["email"] == "baker@sweetshop.test"
        assert "password" not in user and "password_hash" not in user


class TestLogin:

    def test_login_by_email(self, client, auth_headers):
        resp = client.post("/api/auth/login", json={
            "email": "counter@sweetshop.test", "password": TEST_PASSWORD,
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert len(data["token"]) == 64
        assert data["user"]["username"] == "counter"

    def test_wrong_password(self, client, auth_headers):
        assert get_auth_token(client, "counter", "not-the-password") is None
        resp = client.post("/api/auth/login", json={"username": "counter", "password": "nope-nope"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, db_session):
        assert client.post("/api/auth/login", json={"username": "counter"}).status_code == 400

    def test_only_token_hash_is_stored(self, client, auth_headers, db_session):
        token = auth_headers["Authorization"].split(" ", 1)[1]
        stored = db_session.query(SessionToken).all()
        assert stored
        assert all(s.token_hash != token for s in stored)
        assert any(s.token_hash == session_service.hash_token(token) for s in stored)


class TestProtectedRoutes:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/inventory/list"),
            ("POST", "/api/regular-orders/create"),
            ("GET", "/api/event-orders/list"),
            ("POST", "/api/vendors/1/pay"),
            ("GET", "/api/expenses/list"),
            ("POST", "/api/staff/1/attendance"),
            ("GET", "/api/accounting/summary"),
            ("GET", "/api/dashboard/summary"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer deadbeef"})
        assert resp.status_code == 401

    def test_me(self, client, auth_headers):
        resp = client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.get_json()["user"]["username"] == "counter"

    def test_expired_token(self, client, auth_headers, db_session):
        for s in db_session.query(SessionToken).all():
            s.expires_at = s.expires_at - timedelta(days=2)
        db_session.commit()
        assert client.get("/api/auth/me", headers=auth_headers).status_code == 401

    def test_purge_expired(self, auth_headers, db_session):
        for s in db_session.query(SessionToken).all():
            s.expires_at = s.expires_at - timedelta(days=2)
        db_session.commit()
        assert session_service.purge_expired_sessions() == 1
        assert db_session.query(SessionToken).count() == 0


class TestLogout:

    def test_logout_revokes_token(self, client, auth_headers):
        resp = client.post("/api/auth/logout", headers=auth_headers)
        assert resp.status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers).status_code == 401
