# app/controllers/post_controller.py
from __future__ import annotations

import logging
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException, UploadFile
from pymongo import ReturnDocument

from ..db.mongo import comments_collection, communities_collection, posts_collection
from ..models.post_model import MediaModel, PostModel
from ..schemas.post_schema import CommunityPreview, PostOut
from ..services import media_service
from ..utils.ids import contains_id, ensure_oid, same_id, str_ids
from .ally_controller import ally_ids_of
from .community_controller import ensure_can_view_post, get_community_doc, is_member
from .user_controller import load_user_previews

logger = logging.getLogger(__name__)

FEED_MAX_LIMIT = 100


# ---------------------------
# Helpers
# ---------------------------

def _media_out(media: list) -> list:
    return [{"url": media_service.public_url(m.get("url")), "type": m.get("type")} for m in media or []]


async def _to_post_out(docs: List[dict]) -> List[PostOut]:
    """Batch-populate authors and community names."""
    previews = await load_user_previews(d.get("user") for d in docs)

    community_ids = list({d["community"] for d in docs if d.get("community")})
    communities = {}
    if community_ids:
        async for c in communities_collection.find({"_id": {"$in": community_ids}}, {"name": 1, "cover_image": 1}):
            communities[str(c["_id"])] = CommunityPreview(
                id=str(c["_id"]),
                name=c.get("name"),
                cover_image=media_service.public_url(c.get("cover_image")),
            )

    out: List[PostOut] = []
    for d in docs:
        community = None
        if d.get("community"):
            # Keep the reference even if the community document is gone
            community = communities.get(str(d["community"])) or CommunityPreview(id=str(d["community"]))
        out.append(
            PostOut(
                id=str(d["_id"]),
                community=community,
                user=previews.get(str(d.get("user"))),
                text=d.get("text", ""),
                media=_media_out(d.get("media")),
                likes=str_ids(d.get("likes")),
                likes_count=len(d.get("likes") or []),
                comments_count=len(d.get("comments") or []),
                created_at=d.get("created_at"),
            )
        )
    return out


async def _get_post_doc(post_id: str) -> dict:
    oid = ensure_oid(post_id, "Invalid post id")
    post = await posts_collection.find_one({"_id": oid})
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


def _ensure_author(post: dict, current_user: dict, action: str) -> None:
    if not same_id(post.get("user"), current_user["_id"]):
        raise HTTPException(status_code=403, detail=f"You do not have permission to {action} this post")


def _media_from_upload(stored_path: str, content_type: Optional[str]) -> MediaModel:
    return MediaModel(url=stored_path, type=media_service.media_type_for_content_type(content_type))


# ---------------------------
# Create
# ---------------------------

async def create_post(
    current_user: dict,
    text: Optional[str] = None,
    community_id: Optional[str] = None,
    media: Optional[UploadFile] = None,
) -> dict:
    community_oid: Optional[ObjectId] = None
    if community_id:
        community = await get_community_doc(community_id)
        if not is_member(community, current_user["_id"]):
            raise HTTPException(status_code=403, detail="Join the community before posting in it")
        community_oid = community["_id"]

    text = (text or "").strip()
    has_file = media is not None and bool(media.filename)
    if not text and not has_file:
        raise HTTPException(status_code=400, detail="A post needs text or media")

    media_items: List[MediaModel] = []
    if has_file:
        folder = media_service.folder_for_content_type(media.content_type)
        stored = await media_service.save_upload(media, folder)
        media_items.append(_media_from_upload(stored, media.content_type))

    post = PostModel(community=community_oid, user=current_user["_id"], text=text, media=media_items)
    doc = post.to_document()
    result = await posts_collection.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info("Post %s created by %s (community=%s)", result.inserted_id, current_user["_id"], community_oid)
    return {"message": "Post created", "post": (await _to_post_out([doc]))[0]}


# ---------------------------
# Read
# ---------------------------

async def get_community_posts(community_id: str, current_user: dict) -> List[PostOut]:
    community = await get_community_doc(community_id)
    if not is_member(community, current_user["_id"]):
        raise HTTPException(status_code=403, detail="Only community members can view its posts")

    docs = [d async for d in posts_collection.find({"community": community["_id"]}).sort("created_at", -1)]
    return await _to_post_out(docs)


async def get_post_by_id(post_id: str, current_user: Optional[dict]) -> PostOut:
    post = await _get_post_doc(post_id)
    await ensure_can_view_post(post, current_user)
    return (await _to_post_out([post]))[0]


async def get_user_posts(user_id: str, current_user: Optional[dict] = None) -> List[PostOut]:
    """General posts plus community posts the viewer is allowed to see."""
    oid = ensure_oid(user_id, "Invalid user id")
    query: dict = {"user": oid, "community": None}
    if current_user is not None:
        joined = [c["_id"] async for c in communities_collection.find({"members": current_user["_id"]}, {"_id": 1})]
        query = {"user": oid, "$or": [{"community": None}, {"community": {"$in": joined}}]}

    docs = [d async for d in posts_collection.find(query).sort("created_at", -1)]
    return await _to_post_out(docs)


async def get_alliance_feed(current_user: dict, skip: int = 0, limit: int = 20) -> List[PostOut]:
    """
    General posts by the user and their allies, plus every post in the
    communities the user belongs to, newest first.
    """
    me = current_user["_id"]
    authors = await ally_ids_of(me)
    authors.append(me)
    joined = [c["_id"] async for c in communities_collection.find({"members": me}, {"_id": 1})]

    query = {
        "$or": [
            {"user": {"$in": authors}, "community": None},
            {"community": {"$in": joined}},
        ]
    }
    cursor = (
        posts_collection.find(query)
        .sort("created_at", -1)
        .skip(max(0, skip))
        .limit(max(1, min(limit, FEED_MAX_LIMIT)))
    )
    docs = [d async for d in cursor]
    return await _to_post_out(docs)


# ---------------------------
# Like / Unlike
# ---------------------------

async def like_post(post_id: str, current_user: dict) -> dict:
    post = await _get_post_doc(post_id)
    await ensure_can_view_post(post, current_user)
    me = current_user["_id"]

    # Conditional push: only matches while the user is not in likes yet
    updated = await posts_collection.find_one_and_update(
        {"_id": post["_id"], "likes": {"$ne": me}},
        {"$push": {"likes": me}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise HTTPException(status_code=400, detail="You already liked this post")

    return {"message": "Post liked", "likes": len(updated.get("likes") or [])}


async def unlike_post(post_id: str, current_user: dict) -> dict:
    post = await _get_post_doc(post_id)
    await ensure_can_view_post(post, current_user)
    me = current_user["_id"]
    if not contains_id(post.get("likes"), me):
        raise HTTPException(status_code=400, detail="You have not liked this post")

    updated = await posts_collection.find_one_and_update(
        {"_id": post["_id"]},
        {"$pull": {"likes": me}},
        return_document=ReturnDocument.AFTER,
    )
    return {"message": "Like removed", "likes": len((updated or {}).get("likes") or [])}


# ---------------------------
# Update / Delete (author only)
# ---------------------------

async def update_post(
    post_id: str,
    current_user: dict,
    text: Optional[str] = None,
    media: Optional[UploadFile] = None,
) -> dict:
    post = await _get_post_doc(post_id)
    _ensure_author(post, current_user, "edit")

    changes: dict = {}
    text = (text or "").strip()
    if text:
        changes["text"] = text
    if media is not None and media.filename:
        folder = media_service.folder_for_content_type(media.content_type)
        stored = await media_service.save_upload(media, folder)
        changes["media"] = [_media_from_upload(stored, media.content_type).model_dump()]

    if changes:
        await posts_collection.update_one({"_id": post["_id"]}, {"$set": changes})

    updated = await posts_collection.find_one({"_id": post["_id"]})
    return {"message": "Post updated", "post": (await _to_post_out([updated]))[0]}


async def delete_post(post_id: str, current_user: dict) -> dict:
    post = await _get_post_doc(post_id)
    _ensure_author(post, current_user, "delete")

    await comments_collection.delete_many({"post": post["_id"]})
    await posts_collection.delete_one({"_id": post["_id"]})
    return {"message": "Post deleted"}
