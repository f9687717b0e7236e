# app/models/ally_model.py
from datetime import datetime
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, Field

from ..utils.datetime_utils import now_utc


def make_pair_key(a, b) -> str:
    """Order-independent key for an unordered pair of user ids."""
    first, second = sorted((str(a), str(b)))
    return f"{first}:{second}"


class AllyModel(BaseModel):
    """
    One undirected ally edge. user1/user2 keep the order the edge was created in,
    pair_key is what uniqueness is enforced on.
    """
    id: Optional[ObjectId] = Field(alias="_id", default=None)
    user1: ObjectId
    user2: ObjectId
    pair_key: str
    created_at: datetime = Field(default_factory=now_utc)

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "json_encoders": {ObjectId: str},
    }

    @classmethod
    def between(cls, user1: ObjectId, user2: ObjectId) -> "AllyModel":
        return cls(user1=user1, user2=user2, pair_key=make_pair_key(user1, user2))

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"})
