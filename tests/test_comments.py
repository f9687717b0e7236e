from datetime import datetime, timedelta

import pytest

from app.controllers.comment_controller import build_comment_tree
from app.db import mongo
from app.models.comment_model import CommentModel
from app.models.community_model import CommunityModel
from app.models.post_model import PostModel
from app.schemas.comment_schema import CommentOut

from .conftest import auth

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)


async def _post(author, text="topic"):
    doc = PostModel(user=author["_id"], text=text).to_document()
    doc["_id"] = (await mongo.posts_collection.insert_one(doc)).inserted_id
    return doc


async def _comment(post, author, content, minutes=0, parent=None):
    doc = CommentModel(
        post=post["_id"],
        user=author["_id"],
        content=content,
        parent_comment=parent["_id"] if parent else None,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    ).to_document()
    doc["_id"] = (await mongo.comments_collection.insert_one(doc)).inserted_id
    await mongo.posts_collection.update_one({"_id": post["_id"]}, {"$push": {"comments": doc["_id"]}})
    return doc


def _out(cid, parent=None, minutes=0):
    return CommentOut(
        id=cid,
        post="p",
        content=cid,
        parent_comment=parent,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


class TestBuildCommentTree:
    def test_replies_nest_under_parent_oldest_first(self):
        # Newest first, as the listing query returns them
        flat = [
            _out("r2", parent="a", minutes=4),
            _out("b", minutes=3),
            _out("r1", parent="a", minutes=2),
            _out("a", minutes=1),
        ]
        roots = build_comment_tree(flat)
        assert [c.id for c in roots] == ["b", "a"]
        assert [c.id for c in roots[1].replies] == ["r1", "r2"]

    def test_orphan_reply_surfaces_at_top(self):
        roots = build_comment_tree([_out("x", parent="gone")])
        assert [c.id for c in roots] == ["x"]

    def test_nested_replies(self):
        flat = [_out("c", parent="b", minutes=3), _out("b", parent="a", minutes=2), _out("a", minutes=1)]
        [root] = build_comment_tree(flat)
        assert root.replies[0].id == "b"
        assert root.replies[0].replies[0].id == "c"


class TestAddComment:
    @pytest.mark.asyncio
    async def test_add_top_level_and_reply(self, client, make_user):
        alice, token = await make_user("alice")
        post = await _post(alice)

        r = await client.post(f"/api/comments/{post['_id']}", json={"content": "nice"}, headers=auth(token))
        assert r.status_code == 201
        top = r.json()["comment"]
        assert top["user"]["username"] == "alice"
        assert top["parent_comment"] is None

        r = await client.post(
            f"/api/comments/{post['_id']}",
            json={"content": "thanks", "parent_comment_id": top["id"]},
            headers=auth(token),
        )
        assert r.status_code == 201
        assert r.json()["comment"]["parent_comment"] == top["id"]

        stored = await mongo.posts_collection.find_one({"_id": post["_id"]})
        assert len(stored["comments"]) == 2

    @pytest.mark.asyncio
    async def test_parent_from_another_post(self, client, make_user):
        alice, token = await make_user("alice")
        first = await _post(alice, "one")
        second = await _post(alice, "two")
        foreign = await _comment(first, alice, "elsewhere")

        r = await client.post(
            f"/api/comments/{second['_id']}",
            json={"content": "reply", "parent_comment_id": str(foreign["_id"])},
            headers=auth(token),
        )
        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_post(self, client, make_user):
        _, token = await make_user("alice")
        r = await client.post("/api/comments/64b7f0c2a1b2c3d4e5f60718", json={"content": "hi"}, headers=auth(token))
        assert r.status_code == 404

    @pytest.mark.asyncio
    async def test_blank_content(self, client, make_user):
        alice, token = await make_user("alice")
        post = await _post(alice)
        r = await client.post(f"/api/comments/{post['_id']}", json={"content": "   "}, headers=auth(token))
        assert r.status_code == 400


class TestListComments:
    @pytest.mark.asyncio
    async def test_threaded_listing(self, client, make_user):
        alice, _ = await make_user("alice")
        bob, _ = await make_user("bob")
        post = await _post(alice)
        first = await _comment(post, alice, "first", 1)
        await _comment(post, bob, "second", 2)
        await _comment(post, bob, "reply-1", 3, parent=first)
        await _comment(post, alice, "reply-2", 4, parent=first)

        r = await client.get(f"/api/comments/post/{post['_id']}")
        assert r.status_code == 200
        comments = r.json()["comments"]
        assert [c["content"] for c in comments] == ["second", "first"]
        assert [c["content"] for c in comments[1]["replies"]] == ["reply-1", "reply-2"]


class TestCommentLikes:
    @pytest.mark.asyncio
    async def test_like_then_duplicate_then_unlike(self, client, make_user):
        alice, _ = await make_user("alice")
        bob, bob_token = await make_user("bob")
        post = await _post(alice)
        comment = await _comment(post, alice, "like it")

        r = await client.post(f"/api/comments/{comment['_id']}/like", headers=auth(bob_token))
        assert r.status_code == 200
        assert r.json()["comment"]["likes"] == [str(bob["_id"])]

        r = await client.post(f"/api/comments/{comment['_id']}/like", headers=auth(bob_token))
        assert r.status_code == 400

        r = await client.post(f"/api/comments/{comment['_id']}/unlike", headers=auth(bob_token))
        assert r.status_code == 200
        assert r.json()["comment"]["likes"] == []

        r = await client.post(f"/api/comments/{comment['_id']}/unlike", headers=auth(bob_token))
        assert r.status_code == 400


class TestDeleteComment:
    @pytest.mark.asyncio
    async def test_author_only(self, client, make_user):
        alice, _ = await make_user("alice")
        _, bob_token = await make_user("bob")
        post = await _post(alice)
        comment = await _comment(post, alice, "mine")

        r = await client.delete(f"/api/comments/{comment['_id']}", headers=auth(bob_token))
        assert r.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_cascades_to_replies(self, client, make_user):
        alice, alice_token = await make_user("alice")
        bob, _ = await make_user("bob")
        post = await _post(alice)
        root = await _comment(post, alice, "root", 1)
        child = await _comment(post, bob, "child", 2, parent=root)
        await _comment(post, alice, "grandchild", 3, parent=child)
        keep = await _comment(post, bob, "unrelated", 4)

        r = await client.delete(f"/api/comments/{root['_id']}", headers=auth(alice_token))
        assert r.status_code == 200

        remaining = [c["_id"] async for c in mongo.comments_collection.find({})]
        assert remaining == [keep["_id"]]
        stored = await mongo.posts_collection.find_one({"_id": post["_id"]})
        assert stored["comments"] == [keep["_id"]]


class TestMembersOnlyPosts:
    async def _private_post(self, owner):
        community = CommunityModel(
            name="Secret", description="Members only", creator=owner["_id"], members=[owner["_id"]]
        ).to_document()
        community_id = (await mongo.communities_collection.insert_one(community)).inserted_id
        doc = PostModel(user=owner["_id"], text="inside", community=community_id).to_document()
        doc["_id"] = (await mongo.posts_collection.insert_one(doc)).inserted_id
        return doc

    @pytest.mark.asyncio
    async def test_thread_hidden_from_anonymous_and_non_members(self, client, make_user):
        owner, owner_token = await make_user("owner")
        _, outsider_token = await make_user("outsider")
        post = await self._private_post(owner)
        await _comment(post, owner, "hi")

        assert (await client.get(f"/api/comments/post/{post['_id']}")).status_code == 403
        r = await client.get(f"/api/comments/post/{post['_id']}", headers=auth(outsider_token))
        assert r.status_code == 403

        r = await client.get(f"/api/comments/post/{post['_id']}", headers=auth(owner_token))
        assert r.status_code == 200
        assert [c["content"] for c in r.json()["comments"]] == ["hi"]

    @pytest.mark.asyncio
    async def test_non_member_cannot_comment_or_like(self, client, make_user):
        owner, _ = await make_user("owner")
        _, outsider_token = await make_user("outsider")
        post = await self._private_post(owner)
        comment = await _comment(post, owner, "hi")

        r = await client.post(f"/api/comments/{post['_id']}", json={"content": "let me in"}, headers=auth(outsider_token))
        assert r.status_code == 403
        assert await mongo.comments_collection.count_documents({}) == 1

        r = await client.post(f"/api/comments/{comment['_id']}/like", headers=auth(outsider_token))
        assert r.status_code == 403
        r = await client.post(f"/api/comments/{comment['_id']}/unlike", headers=auth(outsider_token))
        assert r.status_code == 403

    @pytest.mark.asyncio
    async def test_listing_unknown_post(self, client):
        r = await client.get("/api/comments/post/64b7f0c2a1b2c3d4e5f60718")
        assert r.status_code == 404
