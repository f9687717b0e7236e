# app/controllers/subscription_controller.py
from __future__ import annotations

import logging
from typing import List, Optional

from bson import ObjectId
from fastapi import HTTPException

from ..db.mongo import communities_collection, subscriptions_collection
from ..models.subscription_model import SubscriptionModel
from ..schemas.subscription_schema import (
    CancelSubscriptionRequest,
    SubscribeRequest,
    SubscriptionOut,
    SubscriptionWithCommunity,
)
from ..utils.datetime_utils import now_utc
from ..utils.ids import ensure_oid
from .community_controller import add_member, community_summary, get_community_doc, remove_member

logger = logging.getLogger(__name__)


# ---------------------------
# Helpers
# ---------------------------

def _subscription_out(doc: dict) -> SubscriptionOut:
    return SubscriptionOut(
        id=str(doc["_id"]),
        user=str(doc["user"]),
        community=str(doc["community"]),
        status=doc.get("status", "active"),
        start_date=doc.get("start_date"),
        end_date=doc.get("end_date"),
        payment_method=doc.get("payment_method") or "manual",
        amount=doc.get("amount") or 0,
    )


async def expire_lapsed_subscriptions(user_oid: Optional[ObjectId] = None) -> int:
    """Active subscriptions whose end_date has passed become 'expired'."""
    q: dict = {"status": "active", "end_date": {"$ne": None, "$lt": now_utc()}}
    if user_oid is not None:
        q["user"] = user_oid
    result = await subscriptions_collection.update_many(q, {"$set": {"status": "expired"}})
    if result.modified_count:
        logger.info("Marked %d subscriptions as expired", result.modified_count)
    return result.modified_count


async def _active_subscription(user_oid: ObjectId, community_oid: ObjectId) -> Optional[dict]:
    await expire_lapsed_subscriptions(user_oid)
    return await subscriptions_collection.find_one(
        {"user": user_oid, "community": community_oid, "status": "active"}
    )


async def _subscribe(current_user: dict, community_id: str, amount: float, payment_method: str) -> dict:
    user_oid = current_user["_id"]
    community = await get_community_doc(community_id)

    if await _active_subscription(user_oid, community["_id"]):
        raise HTTPException(status_code=400, detail="You are already subscribed to this community")

    subscription = SubscriptionModel(
        user=user_oid,
        community=community["_id"],
        amount=amount,
        payment_method=payment_method,
    )
    doc = subscription.to_document()
    result = await subscriptions_collection.insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Subscription %s created: user=%s community=%s", result.inserted_id, user_oid, community["_id"])

    # Separate write from the subscription insert; membership + ally fan-out
    await add_member(community["_id"], user_oid)
    return doc


# ---------------------------
# Subscribe / Join / Cancel
# ---------------------------

async def subscribe(current_user: dict, payload: SubscribeRequest) -> dict:
    doc = await _subscribe(
        current_user,
        payload.community_id,
        amount=payload.amount,
        payment_method=payload.payment_method or "manual",
    )
    return {"message": "Subscription successful", "subscription": _subscription_out(doc)}


async def join_free(current_user: dict, community_id: str) -> dict:
    doc = await _subscribe(current_user, community_id, amount=0, payment_method="manual")
    return {"message": "You joined the community", "subscription": _subscription_out(doc)}


async def cancel_subscription(current_user: dict, payload: CancelSubscriptionRequest) -> dict:
    sub_oid = ensure_oid(payload.subscription_id, "Invalid subscription id")
    subscription = await subscriptions_collection.find_one(
        {"_id": sub_oid, "user": current_user["_id"], "status": "active"}
    )
    if not subscription:
        raise HTTPException(status_code=404, detail="No active subscription with this id")

    end_date = now_utc()
    await subscriptions_collection.update_one(
        {"_id": sub_oid},
        {"$set": {"status": "canceled", "end_date": end_date}},
    )
    await remove_member(subscription["community"], current_user["_id"])

    subscription.update({"status": "canceled", "end_date": end_date})
    return {"message": "Subscription canceled", "subscription": _subscription_out(subscription)}


# ---------------------------
# Reads
# ---------------------------

async def _community_docs(ids: List[ObjectId]) -> dict:
    if not ids:
        return {}
    return {str(c["_id"]): c async for c in communities_collection.find({"_id": {"$in": ids}})}


async def get_my_subscriptions(current_user: dict) -> List[SubscriptionWithCommunity]:
    await expire_lapsed_subscriptions(current_user["_id"])
    subs = [s async for s in subscriptions_collection.find({"user": current_user["_id"]}).sort("start_date", -1)]
    communities = await _community_docs(list({s["community"] for s in subs}))

    out: List[SubscriptionWithCommunity] = []
    for s in subs:
        community = communities.get(str(s["community"]))
        if community is None:
            # Community was deleted; drop the dangling subscription from the listing
            continue
        base = _subscription_out(s).model_dump(exclude={"community"})
        out.append(SubscriptionWithCommunity(**base, community=community_summary(community)))
    return out


async def get_subscribed_communities(current_user: dict) -> list:
    await expire_lapsed_subscriptions(current_user["_id"])
    community_ids = [
        s["community"]
        async for s in subscriptions_collection.find({"user": current_user["_id"], "status": "active"}, {"community": 1})
        if s.get("community")
    ]
    communities = await _community_docs(community_ids)
    logger.debug("User %s has %d active community subscriptions", current_user["_id"], len(communities))
    return [community_summary(c) for c in communities.values()]


async def check_subscription(current_user: dict, community_id: str) -> dict:
    community_oid = ensure_oid(community_id, "Invalid community id")
    subscription = await _active_subscription(current_user["_id"], community_oid)
    return {
        "is_subscribed": subscription is not None,
        "subscription": _subscription_out(subscription) if subscription else None,
    }


async def debug_subscriptions(current_user: dict) -> dict:
    await expire_lapsed_subscriptions(current_user["_id"])
    subs = [s async for s in subscriptions_collection.find({"user": current_user["_id"]})]
    communities = await _community_docs(list({s["community"] for s in subs}))

    entries = []
    for s in subs:
        community = communities.get(str(s["community"]))
        entries.append(
            {
                "subscription_id": s["_id"],
                "status": s.get("status"),
                "start_date": s.get("start_date"),
                "end_date": s.get("end_date"),
                "payment_method": s.get("payment_method"),
                "community_id": s["community"],
                "community_name": community.get("name") if community else None,
                "member_count": len(community.get("members") or []) if community else 0,
                "community_found": community is not None,
            }
        )

    return {
        "user_id": current_user["_id"],
        "total_subscriptions": len(subs),
        "active_subscriptions": sum(1 for s in subs if s.get("status") == "active"),
        "subscriptions": entries,
    }
