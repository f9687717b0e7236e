from datetime import timedelta

import pytest

from app.db import mongo
from app.utils.jwt_utils import create_jwt_token, decode_jwt_token

from .conftest import DEFAULT_PASSWORD, auth


def _register_body(**overrides):
    body = {
        "name": "Alice",
        "username": "Alice_01",
        "email": "Alice@Example.com",
        "password": "secret123",
    }
    body.update(overrides)
    return body


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_token_and_normalized_user(self, client):
        r = await client.post("/api/auth/register", json=_register_body())
        assert r.status_code == 201
        data = r.json()
        assert data["message"] == "User registered"
        assert data["user"]["username"] == "alice_01"
        assert data["user"]["email"] == "alice@example.com"
        assert decode_jwt_token(data["token"])["user_id"] == data["user"]["id"]

        stored = await mongo.users_collection.find_one({"username": "alice_01"})
        assert stored["password"] != "secret123"

    @pytest.mark.asyncio
    async def test_duplicate_email_reports_field(self, client):
        await client.post("/api/auth/register", json=_register_body())
        r = await client.post("/api/auth/register", json=_register_body(username="other_name"))
        assert r.status_code == 400
        detail = r.json()["detail"]
        assert detail["error"] == "User already exists"
        assert "email" in detail["details"]
        assert "username" not in detail["details"]

    @pytest.mark.asyncio
    async def test_collisions_with_two_users_are_both_reported(self, client):
        await client.post("/api/auth/register", json=_register_body())
        await client.post(
            "/api/auth/register",
            json=_register_body(username="bob_02", email="bob@example.com"),
        )
        r = await client.post(
            "/api/auth/register",
            json=_register_body(username="bob_02", email="alice@example.com"),
        )
        assert r.status_code == 400
        assert set(r.json()["detail"]["details"]) == {"email", "username"}

    @pytest.mark.asyncio
    async def test_invalid_fields_are_rejected(self, client):
        r = await client.post(
            "/api/auth/register",
            json=_register_body(email="not-an-email", password="123", username="a!"),
        )
        assert r.status_code == 400
        errors = r.json()["errors"]
        assert set(errors) >= {"email", "password", "username"}
        assert errors["password"] == "Password must be at least 6 characters"


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_success_updates_last_login(self, client, make_user):
        user, _ = await make_user("bob")
        r = await client.post("/api/auth/login", json={"email": "BOB@example.com", "password": DEFAULT_PASSWORD})
        assert r.status_code == 200
        assert r.json()["message"] == "Login successful"

        stored = await mongo.users_collection.find_one({"_id": user["_id"]})
        assert stored.get("last_login") is not None

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, make_user):
        await make_user("bob")
        r = await client.post("/api/auth/login", json={"email": "bob@example.com", "password": "nope-nope"})
        assert r.status_code == 400
        assert r.json()["detail"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client):
        r = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
        assert r.status_code == 400


class TestMe:
    @pytest.mark.asyncio
    async def test_me_returns_profile_without_password(self, client, make_user):
        _, token = await make_user("carol")
        r = await client.get("/api/auth/me", headers=auth(token))
        assert r.status_code == 200
        user = r.json()["user"]
        assert user["username"] == "carol"
        assert "password" not in user

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        r = await client.get("/api/auth/me")
        assert r.status_code == 401
        assert r.json()["detail"] == "Token not provided"

    @pytest.mark.asyncio
    async def test_garbage_token(self, client):
        r = await client.get("/api/auth/me", headers=auth("not.a.jwt"))
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_expired_token(self, client, make_user):
        user, _ = await make_user("dave")
        token = create_jwt_token({"user_id": str(user["_id"])}, expires_delta=timedelta(seconds=-30))
        r = await client.get("/api/auth/me", headers=auth(token))
        assert r.status_code == 401
        assert r.json()["detail"] == "Token expired"

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, client, make_user):
        user, token = await make_user("erin")
        await mongo.users_collection.delete_one({"_id": user["_id"]})
        r = await client.get("/api/auth/me", headers=auth(token))
        assert r.status_code == 404
