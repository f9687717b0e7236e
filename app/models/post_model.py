# app/models/post_model.py
from datetime import datetime
from typing import List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

from ..utils.datetime_utils import now_utc


class MediaModel(BaseModel):
    url: str
    type: Literal["image", "video"]


class PostModel(BaseModel):
    id: Optional[ObjectId] = Field(alias="_id", default=None)
    community: Optional[ObjectId] = None     # None => general post
    user: ObjectId
    text: str = ""
    media: List[MediaModel] = Field(default_factory=list)
    likes: List[ObjectId] = Field(default_factory=list)
    comments: List[ObjectId] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now_utc)

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "json_encoders": {ObjectId: str},
    }

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"})
