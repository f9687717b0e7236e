# app/routes/subscriptions.py
from typing import List

from fastapi import APIRouter, Depends, status

from ..controllers.subscription_controller import (
    cancel_subscription,
    check_subscription,
    debug_subscriptions,
    get_my_subscriptions,
    get_subscribed_communities,
    join_free,
    subscribe,
)
from ..schemas.community_schema import CommunitySummary
from ..schemas.subscription_schema import (
    CancelSubscriptionRequest,
    SubscribeRequest,
    SubscriptionActionResponse,
    SubscriptionCheckResponse,
    SubscriptionDebugResponse,
    SubscriptionWithCommunity,
)
from ..utils.auth_utils import get_current_user

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])

# ---------- Static paths first ----------

@router.post(
    "/subscribe",
    response_model=SubscriptionActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Subscribe to a community",
)
async def subscribe_route(data: SubscribeRequest, user: dict = Depends(get_current_user)):
    return await subscribe(user, data)


@router.post("/cancel", response_model=SubscriptionActionResponse, summary="Cancel my active subscription")
async def cancel_route(data: CancelSubscriptionRequest, user: dict = Depends(get_current_user)):
    return await cancel_subscription(user, data)


@router.get("/my-subscriptions", response_model=List[SubscriptionWithCommunity], summary="All my subscriptions")
async def my_subscriptions_route(user: dict = Depends(get_current_user)):
    return await get_my_subscriptions(user)


@router.get("/by-user", response_model=List[CommunitySummary], summary="Communities of my active subscriptions")
async def by_user_route(user: dict = Depends(get_current_user)):
    return await get_subscribed_communities(user)


@router.get("/debug-subscriptions", response_model=SubscriptionDebugResponse, summary="Diagnostic view of my subscriptions")
async def debug_route(user: dict = Depends(get_current_user)):
    return await debug_subscriptions(user)


@router.get("/check/{community_id}", response_model=SubscriptionCheckResponse, summary="Am I subscribed to this community?")
async def check_route(community_id: str, user: dict = Depends(get_current_user)):
    return await check_subscription(user, community_id)


@router.post("/{community_id}/join", response_model=SubscriptionActionResponse, summary="Join a community (free subscription)")
async def join_route(community_id: str, user: dict = Depends(get_current_user)):
    return await join_free(user, community_id)
