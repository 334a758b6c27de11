"""Tests for registration, login, tokens and credential hashing."""
from eventlog.services.auth_service import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from tests.conftest import register_user


class TestPasswordHashing:

    def test_hash_is_salted_and_verifies(self):
        first = hash_password("s3cret-pass")
        second = hash_password("s3cret-pass")
        assert first != second
        assert first.startswith("pbkdf2_sha256$")
        assert verify_password("s3cret-pass", first)
        assert verify_password("s3cret-pass", second)

    def test_wrong_password_rejected(self):
        stored = hash_password("s3cret-pass")
        assert not verify_password("other-pass", stored)

    def test_malformed_hash_rejected(self):
        assert not verify_password("anything", "not-a-hash")
        assert not verify_password("anything", "md5$1$abc$def")


class TestRegister:

    def test_register_returns_user_and_token(self, client):
        user = register_user(client, username="alice", display_name="Alice A")
        assert user["username"] == "alice"
        assert user["email"] == "alice@example.com"
        assert user["display_name"] == "Alice A"
        assert "password_hash" not in user
        assert "password" not in user
        assert decode_access_token(user["token"]).sub == user["user_id"]

    def test_duplicate_email(self, client):
        register_user(client, username="alice")
        resp = client.post("/api/auth/register", json={
            "username": "alice2",
            "email": "alice@example.com",
            "displayName": "Alice Two",
            "password": "password123",
        })
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"

    def test_duplicate_username(self, client):
        register_user(client, username="alice")
        resp = client.post("/api/auth/register", json={
            "username": "alice",
            "email": "other@example.com",
            "displayName": "Other",
            "password": "password123",
        })
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "USERNAME_ALREADY_EXISTS"

    def test_invalid_payload(self, client):
        resp = client.post("/api/auth/register", json={
            "username": "no spaces allowed",
            "email": "not-an-email",
            "displayName": "",
            "password": "short",
        })
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["path"] == "/api/auth/register"


class TestLogin:

    def test_login_success(self, client):
        user = register_user(client, username="bob", password="hunter2hunter2")
        resp = client.post("/api/auth/login", json={
            "email": "bob@example.com",
            "password": "hunter2hunter2",
        })
        assert resp.status_code == 200
        assert resp.json()["user"]["user_id"] == user["user_id"]
        assert resp.json()["expires_in"] > 0

    def test_wrong_password_and_unknown_email_look_the_same(self, client):
        register_user(client, username="bob", password="hunter2hunter2")
        wrong_pw = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "nope"})
        unknown = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "nope"})
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json()["error"] == unknown.json()["error"]


class TestCurrentUser:

    def test_me(self, client):
        user = register_user(client, username="carol")
        resp = client.get("/api/auth/me", headers=user["headers"])
        assert resp.status_code == 200
        assert resp.json()["username"] == "carol"

    def test_missing_token(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "MISSING_TOKEN"

    def test_garbage_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "INVALID_TOKEN"

    def test_token_for_deleted_user(self, client):
        user = register_user(client, username="dave")
        assert client.delete(f"/api/users/{user['user_id']}", headers=user["headers"]).status_code == 204
        resp = client.get("/api/auth/me", headers=user["headers"])
        assert resp.status_code == 401

    def test_token_round_trip(self, db):
        from eventlog.services import user_service
        user = user_service.create_user(db, "erin", "erin@example.com", "Erin", "password123")
        claims = decode_access_token(create_access_token(user))
        assert claims.sub == user.user_id
        assert claims.username == "erin"
