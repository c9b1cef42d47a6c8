"""Tests for user administration (admin-only routes and the user service)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.services.auth import authenticate_user, create_user
from app.services.errors import UsernameTakenError, UserNotFoundError, ValidationError
from app.services.user import deactivate_user, get_user
from tests.test_constants import TEST_ADMIN_USERNAME, TEST_PASSWORD, TEST_USERNAME


class TestAccess:
    def test_requires_auth(self, client: TestClient):
        assert client.get("/api/users").status_code == 401

    def test_manager_is_forbidden(self, api_client: TestClient):
        resp = api_client.get("/api/users")
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Admin role required"

    def test_manager_cannot_create_users(self, api_client: TestClient):
        resp = api_client.post("/api/users", json={"username": "eve", "password": "x"})
        assert resp.status_code == 403


class TestUserRoutes:
    def test_list_includes_admin(self, admin_client, admin_user):
        resp = admin_client.get("/api/users")
        assert resp.status_code == 200
        items = resp.json()["items"]
        assert [u["username"] for u in items] == [TEST_ADMIN_USERNAME]
        assert items[0]["role"] == "admin"
        assert "password_hash" not in items[0]

    def test_create_user(self, admin_client, db):
        resp = admin_client.post(
            "/api/users",
            json={"username": " alice ", "password": "s3cret", "full_name": "Alice A"},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["username"] == "alice"
        assert data["role"] == "manager"
        assert data["is_active"] is True
        assert authenticate_user(db, "alice", "s3cret") is not None

    def test_duplicate_username_is_409(self, admin_client):
        body = {"username": "bob", "password": "pw"}
        assert admin_client.post("/api/users", json=body).status_code == 201
        resp = admin_client.post("/api/users", json=body)
        assert resp.status_code == 409
        assert "bob" in resp.json()["detail"]

    def test_unknown_role_is_422(self, admin_client):
        resp = admin_client.post(
            "/api/users", json={"username": "carol", "password": "pw", "role": "owner"}
        )
        assert resp.status_code == 422

    def test_get_unknown_user_is_404(self, admin_client):
        assert admin_client.get("/api/users/999999").status_code == 404

    def test_update_profile_and_role(self, admin_client, user):
        resp = admin_client.put(
            f"/api/users/{user.id}", json={"full_name": "Renamed", "role": "admin"}
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["full_name"] == "Renamed"
        assert data["role"] == "admin"
        assert data["username"] == TEST_USERNAME

    def test_password_change(self, admin_client, db, user):
        resp = admin_client.put(f"/api/users/{user.id}", json={"password": "new-pass"})
        assert resp.status_code == 200
        assert authenticate_user(db, TEST_USERNAME, TEST_PASSWORD) is None
        assert authenticate_user(db, TEST_USERNAME, "new-pass") is not None

    def test_deactivate_blocks_login(self, admin_client, db, user):
        assert admin_client.delete(f"/api/users/{user.id}").status_code == 204
        assert admin_client.get(f"/api/users/{user.id}").json()["is_active"] is False
        assert authenticate_user(db, TEST_USERNAME, TEST_PASSWORD) is None

    def test_cannot_deactivate_self(self, admin_client, admin_user):
        resp = admin_client.delete(f"/api/users/{admin_user.id}")
        assert resp.status_code == 422
        assert admin_client.get(f"/api/users/{admin_user.id}").json()["is_active"] is True


class TestUserService:
    def test_create_duplicate_raises(self, db, user):
        with pytest.raises(UsernameTakenError):
            create_user(db, TEST_USERNAME, "other")

    def test_get_unknown_raises(self, db):
        with pytest.raises(UserNotFoundError):
            get_user(db, 424242)

    def test_deactivate_self_raises(self, db, user):
        with pytest.raises(ValidationError):
            deactivate_user(db, user.id, actor_id=user.id)
        assert get_user(db, user.id).is_active is True
