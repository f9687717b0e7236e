# app/models/subscription_model.py
from datetime import datetime
from typing import Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

from ..utils.datetime_utils import now_utc

SubscriptionStatus = Literal["active", "canceled", "expired"]


class SubscriptionModel(BaseModel):
    id: Optional[ObjectId] = Field(alias="_id", default=None)
    user: ObjectId
    community: ObjectId
    status: SubscriptionStatus = "active"
    start_date: datetime = Field(default_factory=now_utc)
    end_date: Optional[datetime] = None
    payment_method: str = "manual"
    amount: float = Field(default=0, ge=0)

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "json_encoders": {ObjectId: str},
    }

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"})
