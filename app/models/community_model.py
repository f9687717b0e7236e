# app/models/community_model.py
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

from ..utils.datetime_utils import now_utc


class CommunityModel(BaseModel):
    id: Optional[ObjectId] = Field(alias="_id", default=None)
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    cover_image: str = ""
    creator: ObjectId
    members: List[ObjectId] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now_utc)

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "json_encoders": {ObjectId: str},
    }

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"})
