# app/controllers/community_controller.py
from __future__ import annotations

import logging
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException, UploadFile
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..db.mongo import (
    comments_collection,
    communities_collection,
    posts_collection,
    subscriptions_collection,
)
from ..models.community_model import CommunityModel
from ..schemas.community_schema import CommunityOut, CommunitySummary
from ..services import media_service
from ..utils.datetime_utils import now_utc
from ..utils.ids import contains_id, ensure_oid, same_id, str_ids
from .ally_controller import fan_out_allies
from .user_controller import load_user_previews

logger = logging.getLogger(__name__)


# ---------------------------
# Helpers
# ---------------------------

def community_summary(doc: dict) -> CommunitySummary:
    return CommunitySummary(
        id=str(doc["_id"]),
        name=doc.get("name", ""),
        description=doc.get("description", ""),
        cover_image=media_service.public_url(doc.get("cover_image")),
        creator=str(doc.get("creator")),
        members=str_ids(doc.get("members")),
        created_at=doc.get("created_at"),
    )


async def _populate(docs: List[dict]) -> List[CommunityOut]:
    """Attach creator/member previews with one users query for the whole batch."""
    ids = []
    for doc in docs:
        ids.append(doc.get("creator"))
        ids.extend(doc.get("members") or [])
    previews = await load_user_previews(ids)

    out: List[CommunityOut] = []
    for doc in docs:
        members = [previews[str(m)] for m in doc.get("members") or [] if str(m) in previews]
        out.append(
            CommunityOut(
                id=str(doc["_id"]),
                name=doc.get("name", ""),
                description=doc.get("description", ""),
                cover_image=media_service.public_url(doc.get("cover_image")),
                creator=previews.get(str(doc.get("creator"))),
                members=members,
                members_count=len(doc.get("members") or []),
                created_at=doc.get("created_at"),
            )
        )
    return out


async def get_community_doc(community_id) -> dict:
    oid = ensure_oid(community_id, "Invalid community id")
    doc = await communities_collection.find_one({"_id": oid})
    if not doc:
        raise HTTPException(status_code=404, detail="Community not found")
    return doc


def is_member(community: dict, user_oid: ObjectId) -> bool:
    return contains_id(community.get("members"), user_oid)


async def ensure_can_view_post(post: dict, current_user: Optional[dict]) -> None:
    """Community posts are visible to members only; general posts are public."""
    if not post.get("community"):
        return
    community = await communities_collection.find_one({"_id": post["community"]}, {"members": 1})
    if community is None:
        return
    if current_user is None or not is_member(community, current_user["_id"]):
        raise HTTPException(status_code=403, detail="Only community members can view this post")


def _ensure_creator(community: dict, user: dict, action: str) -> None:
    if not same_id(community.get("creator"), user["_id"]):
        raise HTTPException(status_code=403, detail=f"You do not have permission to {action} this community")


async def _ensure_name_free(name: str, exclude_oid: Optional[ObjectId] = None) -> None:
    q: dict = {"name": name}
    if exclude_oid:
        q["_id"] = {"$ne": exclude_oid}
    if await communities_collection.find_one(q, {"_id": 1}):
        raise HTTPException(status_code=400, detail="Community name is already in use.")


async def add_member(community_id: ObjectId, user_oid: ObjectId) -> dict:
    """
    Adds the user to members (no-op if present) and makes them allies with every
    other member. Returns the updated community document.
    """
    updated = await communities_collection.find_one_and_update(
        {"_id": community_id},
        {"$addToSet": {"members": user_oid}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Community not found")

    created = await fan_out_allies(user_oid, updated.get("members") or [])
    logger.info("User %s joined community %s (%d new ally edges)", user_oid, community_id, created)
    return updated


async def remove_member(community_id: ObjectId, user_oid: ObjectId) -> Optional[dict]:
    return await communities_collection.find_one_and_update(
        {"_id": community_id},
        {"$pull": {"members": user_oid}},
        return_document=ReturnDocument.AFTER,
    )


# ---------------------------
# Create / Read
# ---------------------------

async def create_community(
    current_user: dict,
    name: Optional[str],
    description: Optional[str],
    cover_image: Optional[UploadFile] = None,
) -> dict:
    name = (name or "").strip()
    description = (description or "").strip()
    if not name or not description:
        raise HTTPException(status_code=400, detail="Name and description are required")

    await _ensure_name_free(name)

    cover_path = ""
    if cover_image is not None and cover_image.filename:
        cover_path = await media_service.save_upload(cover_image, media_service.BANNERS)

    community = CommunityModel(
        name=name,
        description=description,
        cover_image=cover_path,
        creator=current_user["_id"],
        members=[current_user["_id"]],
    )
    doc = community.to_document()
    try:
        result = await communities_collection.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Community name is already in use.")

    doc["_id"] = result.inserted_id
    logger.info("Community %s (%s) created by %s", result.inserted_id, name, current_user["_id"])
    return {"message": "Community created", "community": community_summary(doc)}


async def get_all_communities() -> List[CommunityOut]:
    docs = [doc async for doc in communities_collection.find().sort("created_at", -1)]
    return await _populate(docs)


async def get_community_by_id(community_id: str) -> CommunityOut:
    doc = await get_community_doc(community_id)
    return (await _populate([doc]))[0]


async def get_communities_created_by(user_id: str) -> List[CommunitySummary]:
    oid = ensure_oid(user_id, "Invalid user id")
    cursor = communities_collection.find({"creator": oid}).sort("created_at", -1)
    return [community_summary(doc) async for doc in cursor]


# ---------------------------
# Membership
# ---------------------------

async def join_community(community_id: str, current_user: dict) -> dict:
    community = await get_community_doc(community_id)
    updated = await add_member(community["_id"], current_user["_id"])
    return {"message": "You joined the community", "community": community_summary(updated)}


async def leave_community(community_id: str, current_user: dict) -> dict:
    community = await get_community_doc(community_id)
    updated = await remove_member(community["_id"], current_user["_id"])
    if not updated:
        raise HTTPException(status_code=404, detail="Community not found")

    await subscriptions_collection.update_many(
        {"user": current_user["_id"], "community": community["_id"], "status": "active"},
        {"$set": {"status": "canceled", "end_date": now_utc()}},
    )
    return {"message": "You left the community", "community": community_summary(updated)}


# ---------------------------
# Update / Delete (creator only)
# ---------------------------

async def update_community(
    community_id: str,
    current_user: dict,
    name: Optional[str] = None,
    description: Optional[str] = None,
    cover_image: Optional[UploadFile] = None,
) -> dict:
    community = await get_community_doc(community_id)
    _ensure_creator(community, current_user, "edit")

    changes: dict = {}
    name = (name or "").strip()
    description = (description or "").strip()
    if name and name != community.get("name"):
        await _ensure_name_free(name, exclude_oid=community["_id"])
        changes["name"] = name
    if description:
        changes["description"] = description
    if cover_image is not None and cover_image.filename:
        changes["cover_image"] = await media_service.save_upload(cover_image, media_service.BANNERS)

    if changes:
        try:
            await communities_collection.update_one({"_id": community["_id"]}, {"$set": changes})
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail="Community name is already in use.")

    updated = await communities_collection.find_one({"_id": community["_id"]})
    return {"message": "Community updated", "community": community_summary(updated)}


async def delete_community(community_id: str, current_user: dict) -> dict:
    community = await get_community_doc(community_id)
    _ensure_creator(community, current_user, "delete")

    post_ids = [p["_id"] async for p in posts_collection.find({"community": community["_id"]}, {"_id": 1})]
    if post_ids:
        await comments_collection.delete_many({"post": {"$in": post_ids}})
        await posts_collection.delete_many({"_id": {"$in": post_ids}})

    await subscriptions_collection.update_many(
        {"community": community["_id"], "status": "active"},
        {"$set": {"status": "canceled", "end_date": now_utc()}},
    )
    await communities_collection.delete_one({"_id": community["_id"]})

    logger.info("Community %s deleted by %s (%d posts removed)", community["_id"], current_user["_id"], len(post_ids))
    return {"message": "Community deleted"}
