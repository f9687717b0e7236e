# app/controllers/ally_controller.py
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from bson import ObjectId
from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError

from ..db.mongo import allies_collection, users_collection
from ..models.ally_model import AllyModel, make_pair_key
from ..schemas._common import UserPreview
from ..schemas.ally_schema import AddAllyRequest
from ..utils.ids import ensure_oid, same_id
from .user_controller import load_user_previews, user_preview

logger = logging.getLogger(__name__)


# -----------------------------
# Edge helpers
# -----------------------------
def _edge_query(user_oid: ObjectId) -> dict:
    return {"$or": [{"user1": user_oid}, {"user2": user_oid}]}


async def ensure_ally(user_a: ObjectId, user_b: ObjectId) -> bool:
    """
    Idempotently create the edge between two users.
    Returns True when a new edge was written, False if it already existed.
    """
    if same_id(user_a, user_b):
        return False

    edge = AllyModel.between(user_a, user_b)
    try:
        result = await allies_collection.update_one(
            {"pair_key": edge.pair_key},
            {"$setOnInsert": edge.to_document()},
            upsert=True,
        )
    except DuplicateKeyError:
        # Concurrent upsert on the same pair; the other writer won
        return False

    created = result.upserted_id is not None
    if created:
        logger.info("Ally edge created between %s and %s", user_a, user_b)
    return created


async def ally_ids_of(user_oid: ObjectId) -> List[ObjectId]:
    """Ids of everyone sharing an edge with the user."""
    ids: List[ObjectId] = []
    async for edge in allies_collection.find(_edge_query(user_oid)):
        other = edge["user2"] if same_id(edge["user1"], user_oid) else edge["user1"]
        ids.append(other)
    return ids


async def fan_out_allies(joiner: ObjectId, members: Iterable[ObjectId]) -> int:
    """Ensures an edge between the joiner and every other member; returns how many were new."""
    created = 0
    for member_id in members:
        if same_id(member_id, joiner):
            continue
        if await ensure_ally(joiner, member_id):
            created += 1
    return created


async def _allies_of(user_oid: ObjectId) -> List[UserPreview]:
    ids = await ally_ids_of(user_oid)
    previews = await load_user_previews(ids)
    # Edges pointing at deleted users are skipped
    return [previews[str(i)] for i in ids if str(i) in previews]


# -----------------------------
# Routes
# -----------------------------
async def get_my_allies(user: dict) -> dict:
    return {"message": "Allies fetched", "allies": await _allies_of(user["_id"])}


async def get_user_allies(user_id: str) -> dict:
    oid = ensure_oid(user_id, "Invalid user id")
    return {"message": "Allies fetched", "allies": await _allies_of(oid)}


async def add_ally(user: dict, payload: AddAllyRequest) -> dict:
    if not payload.user_id:
        raise HTTPException(status_code=400, detail={"error": "Incomplete data", "details": {"user_id": "user_id is required"}})

    target_oid = ensure_oid(payload.user_id, "Invalid user id")
    target = await users_collection.find_one({"_id": target_oid})
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    if same_id(target_oid, user["_id"]):
        raise HTTPException(status_code=400, detail="You cannot add yourself as an ally")

    existing = await allies_collection.find_one({"pair_key": make_pair_key(user["_id"], target_oid)})
    if existing:
        raise HTTPException(status_code=400, detail="You are already allies with this user")

    try:
        await allies_collection.insert_one(AllyModel.between(user["_id"], target_oid).to_document())
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="You are already allies with this user")

    logger.info("User %s added ally %s", user["_id"], target_oid)
    return {"message": "Ally added", "ally": user_preview(target)}


async def remove_ally(user: dict, user_id: str) -> dict:
    target_oid = ensure_oid(user_id, "Invalid user id")
    result = await allies_collection.delete_one({"pair_key": make_pair_key(user["_id"], target_oid)})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="No ally relationship with this user")
    return {"message": "Ally removed"}


async def check_ally(user: dict, target_user_id: str) -> dict:
    target_oid: Optional[ObjectId] = ensure_oid(target_user_id, "Invalid user id")
    edge = await allies_collection.find_one({"pair_key": make_pair_key(user["_id"], target_oid)}, {"_id": 1})
    return {"is_ally": edge is not None}


async def create_all_allies() -> dict:
    """Backfill: every pair of users becomes allies."""
    user_ids = [doc["_id"] async for doc in users_collection.find({}, {"_id": 1})]
    created = 0
    for i, first in enumerate(user_ids):
        for second in user_ids[i + 1:]:
            if await ensure_ally(first, second):
                created += 1
    logger.info("Ally backfill created %d edges across %d users", created, len(user_ids))
    return {"message": "Ally relationships created", "created": created}
