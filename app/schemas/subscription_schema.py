# app/schemas/subscription_schema.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ._common import PyObjectId
from .community_schema import CommunitySummary


class SubscribeRequest(BaseModel):
    community_id: str
    amount: float = Field(default=0, ge=0)
    payment_method: Optional[str] = None


class CancelSubscriptionRequest(BaseModel):
    subscription_id: str


class SubscriptionOut(BaseModel):
    id: PyObjectId
    user: PyObjectId
    community: PyObjectId
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    payment_method: str = "manual"
    amount: float = 0


class SubscriptionWithCommunity(SubscriptionOut):
    community: CommunitySummary


class SubscriptionActionResponse(BaseModel):
    message: str
    subscription: SubscriptionOut


class SubscriptionCheckResponse(BaseModel):
    is_subscribed: bool
    subscription: Optional[SubscriptionOut] = None


class SubscriptionDebugEntry(BaseModel):
    subscription_id: PyObjectId
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    payment_method: Optional[str] = None
    community_id: PyObjectId
    community_name: Optional[str] = None
    member_count: int = 0
    community_found: bool = True


class SubscriptionDebugResponse(BaseModel):
    user_id: PyObjectId
    total_subscriptions: int
    active_subscriptions: int
    subscriptions: List[SubscriptionDebugEntry]
