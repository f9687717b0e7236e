import os

import pytest

from app.db import mongo

from .conftest import auth


class TestProfile:
    @pytest.mark.asyncio
    async def test_get_profile_by_id(self, client, make_user):
        bob, _ = await make_user("bob")
        _, token = await make_user("alice")
        r = await client.get(f"/api/users/profile/{bob['_id']}", headers=auth(token))
        assert r.status_code == 200
        assert r.json()["username"] == "bob"

    @pytest.mark.asyncio
    async def test_get_profile_invalid_id(self, client, make_user):
        _, token = await make_user("alice")
        r = await client.get("/api/users/profile/not-an-id", headers=auth(token))
        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_update_profile_fields(self, client, make_user):
        _, token = await make_user("alice")
        r = await client.put(
            "/api/users/profile/update",
            json={"bio": "  hello there ", "category": "Arte", "links": "example.com, https://foo.org"},
            headers=auth(token),
        )
        assert r.status_code == 200
        user = r.json()["user"]
        assert user["bio"] == "hello there"
        assert user["category"] == "Arte"
        assert user["links"] == ["example.com", "https://foo.org"]

    @pytest.mark.asyncio
    async def test_update_username_taken(self, client, make_user):
        await make_user("bob")
        _, token = await make_user("alice")
        r = await client.put("/api/users/profile/update", json={"username": "BOB"}, headers=auth(token))
        assert r.status_code == 400
        assert r.json()["detail"] == "Username is already in use"

    @pytest.mark.asyncio
    async def test_update_rejects_bad_link(self, client, make_user):
        user, token = await make_user("alice")
        r = await client.put("/api/users/profile/update", json={"links": ["notalink"]}, headers=auth(token))
        assert r.status_code == 400
        assert "links" in r.json()["detail"]["details"]

        stored = await mongo.users_collection.find_one({"_id": user["_id"]})
        assert stored["links"] == []

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_category(self, client, make_user):
        _, token = await make_user("alice")
        r = await client.put("/api/users/profile/update", json={"category": "Cooking"}, headers=auth(token))
        assert r.status_code == 400
        assert "category" in r.json()["errors"]

    @pytest.mark.asyncio
    async def test_replace_profile_blocks(self, client, make_user):
        user, token = await make_user("alice")
        blocks = [
            {"type": "text", "content": "Hi", "position": 0},
            {"type": "link", "content": {"url": "https://x.io"}, "position": 1},
        ]
        r = await client.put("/api/users/profile/blocks", json={"profile_blocks": blocks}, headers=auth(token))
        assert r.status_code == 200
        assert [b["type"] for b in r.json()["profile_blocks"]] == ["text", "link"]

        stored = await mongo.users_collection.find_one({"_id": user["_id"]})
        assert len(stored["profile_blocks"]) == 2


class TestUploads:
    @pytest.mark.asyncio
    async def test_profile_photo_is_stored(self, client, make_user):
        user, token = await make_user("alice")
        r = await client.put(
            "/api/users/profile/photo",
            files={"profile_picture": ("my face.png", b"\x89PNG fake", "image/png")},
            headers=auth(token),
        )
        assert r.status_code == 200
        url = r.json()["profile_picture"]
        assert url.startswith("http://test/uploads/profile_pictures/")
        assert url.endswith("-my_face.png")

        stored = await mongo.users_collection.find_one({"_id": user["_id"]})
        filename = stored["profile_picture"].rsplit("/", 1)[-1]
        assert os.path.exists(os.path.join(os.environ["UPLOAD_DIR"], "profile_pictures", filename))

    @pytest.mark.asyncio
    async def test_photo_without_file(self, client, make_user):
        _, token = await make_user("alice")
        r = await client.put("/api/users/profile/photo", headers=auth(token))
        assert r.status_code == 400


class TestDiscovery:
    @pytest.mark.asyncio
    async def test_recommended_excludes_self(self, client, make_user):
        await make_user("bob")
        await make_user("carol")
        _, token = await make_user("alice")
        r = await client.get("/api/users/recommended", headers=auth(token))
        assert r.status_code == 200
        assert sorted(u["username"] for u in r.json()) == ["bob", "carol"]

    @pytest.mark.asyncio
    async def test_recommended_anonymous(self, client, make_user):
        await make_user("bob")
        r = await client.get("/api/users/recommended")
        assert r.status_code == 200
        assert len(r.json()) == 1

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, client, make_user):
        await make_user("bob_builder", name="Bob Builder")
        await make_user("carol")
        r = await client.get("/api/users/search", params={"query": "BUILD"})
        assert r.status_code == 200
        assert [u["username"] for u in r.json()] == ["bob_builder"]

    @pytest.mark.asyncio
    async def test_search_treats_query_literally(self, client, make_user):
        await make_user("carol")
        r = await client.get("/api/users/search", params={"query": ".*"})
        assert r.status_code == 200
        assert r.json() == []

    @pytest.mark.asyncio
    async def test_search_empty_query(self, client):
        r = await client.get("/api/users/search", params={"query": "  "})
        assert r.status_code == 400
