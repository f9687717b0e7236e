# app/controllers/user_controller.py
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from fastapi import HTTPException, UploadFile
from pydantic import ValidationError

from ..db.mongo import users_collection
from ..models.user_model import UserModel, normalize_username
from ..schemas._common import UserPreview
from ..schemas.user_schema import ProfileUpdateRequest, UserProfileOut
from ..services import media_service
from ..utils.ids import ensure_oid

logger = logging.getLogger(__name__)

PREVIEW_PROJECTION = {"name": 1, "username": 1, "profile_picture": 1, "bio": 1, "category": 1}
RECOMMENDED_LIMIT = 10


# ---------------------------
# Shaping helpers (shared with the other controllers)
# ---------------------------

def user_preview(doc: dict) -> UserPreview:
    return UserPreview(
        id=str(doc["_id"]),
        name=doc.get("name"),
        username=doc.get("username"),
        profile_picture=media_service.public_url(doc.get("profile_picture")),
        bio=doc.get("bio"),
        category=doc.get("category"),
    )


def user_profile(doc: dict) -> UserProfileOut:
    return UserProfileOut(
        id=str(doc["_id"]),
        name=doc.get("name"),
        username=doc.get("username"),
        email=doc.get("email"),
        profile_picture=media_service.public_url(doc.get("profile_picture")),
        banner_image=media_service.public_url(doc.get("banner_image")),
        bio=doc.get("bio") or "",
        category=doc.get("category") or "",
        links=doc.get("links") or [],
        profile_blocks=doc.get("profile_blocks") or [],
        subscription_price=doc.get("subscription_price") or 0,
    )


async def load_user_previews(ids: Iterable) -> Dict[str, UserPreview]:
    """Batch-load previews keyed by str(id); unknown ids are simply absent."""
    oids = list({ObjectId(str(i)) for i in ids if i is not None and ObjectId.is_valid(str(i))})
    if not oids:
        return {}
    previews: Dict[str, UserPreview] = {}
    async for doc in users_collection.find({"_id": {"$in": oids}}, PREVIEW_PROJECTION):
        previews[str(doc["_id"])] = user_preview(doc)
    return previews


def validation_details(exc: ValidationError) -> Dict[str, str]:
    details: Dict[str, str] = {}
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        details[field] = err.get("msg", "Invalid value")
    return details


async def _get_user_doc(user_oid: ObjectId) -> dict:
    doc = await users_collection.find_one({"_id": user_oid})
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    return doc


# ---------------------------
# Profiles
# ---------------------------

async def get_my_profile(current_user: dict) -> UserProfileOut:
    return user_profile(current_user)


async def get_profile_by_id(user_id: str) -> UserProfileOut:
    oid = ensure_oid(user_id, "Invalid user id")
    return user_profile(await _get_user_doc(oid))


async def update_profile(current_user: dict, data: ProfileUpdateRequest) -> dict:
    """Only provided fields change; the merged document is revalidated before saving."""
    user_oid = current_user["_id"]
    changes = data.model_dump(exclude_none=True)

    if "username" in changes:
        try:
            changes["username"] = normalize_username(changes["username"])
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        taken = await users_collection.find_one(
            {"username": changes["username"], "_id": {"$ne": user_oid}}, {"_id": 1}
        )
        if taken:
            raise HTTPException(status_code=400, detail="Username is already in use")

    merged = {**current_user, **changes}
    try:
        UserModel(**merged)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"error": "Validation error", "details": validation_details(e)})

    if changes:
        await users_collection.update_one({"_id": user_oid}, {"$set": changes})

    updated = await _get_user_doc(user_oid)
    return {"message": "Profile updated", "user": user_profile(updated)}


async def _store_profile_image(current_user: dict, file: UploadFile, folder: str, field: str) -> str:
    stored = await media_service.save_upload(file, folder)
    result = await users_collection.update_one({"_id": current_user["_id"]}, {"$set": {field: stored}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="User not found")
    return media_service.public_url(stored)


async def update_profile_picture(current_user: dict, file: UploadFile) -> dict:
    url = await _store_profile_image(current_user, file, media_service.PROFILE_PICTURES, "profile_picture")
    return {"message": "Profile picture updated", "profile_picture": url}


async def update_banner_image(current_user: dict, file: UploadFile) -> dict:
    url = await _store_profile_image(current_user, file, media_service.BANNERS, "banner_image")
    return {"message": "Banner updated", "banner_image": url}


async def update_profile_blocks(current_user: dict, blocks: List) -> dict:
    payload = [b.model_dump() for b in blocks]
    result = await users_collection.update_one({"_id": current_user["_id"]}, {"$set": {"profile_blocks": payload}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "Profile blocks updated", "profile_blocks": payload}


async def upload_profile_content(file: UploadFile) -> dict:
    stored = await media_service.save_upload(file, media_service.PROFILE_CONTENT)
    return {"message": "Image uploaded", "url": media_service.public_url(stored)}


# ---------------------------
# Discovery
# ---------------------------

async def get_recommended_users(current_user: Optional[dict] = None) -> List[UserPreview]:
    query: dict = {}
    if current_user:
        query["_id"] = {"$ne": current_user["_id"]}
    cursor = users_collection.find(query, PREVIEW_PROJECTION).limit(RECOMMENDED_LIMIT)
    return [user_preview(doc) async for doc in cursor]


async def search_users(query: Optional[str], limit: int = 20, skip: int = 0) -> List[UserPreview]:
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Search query cannot be empty.")

    pattern = {"$regex": re.escape(query.strip()), "$options": "i"}
    cursor = (
        users_collection.find({"$or": [{"name": pattern}, {"username": pattern}]}, PREVIEW_PROJECTION)
        .sort("name", 1)
        .skip(max(0, skip))
        .limit(max(1, min(limit, 50)))
    )
    return [user_preview(doc) async for doc in cursor]
