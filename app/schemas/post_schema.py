# app/schemas/post_schema.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ._common import PyObjectId, UserPreview


class MediaOut(BaseModel):
    url: str
    type: str


class CommunityPreview(BaseModel):
    id: PyObjectId
    name: Optional[str] = None
    cover_image: Optional[str] = None


class PostOut(BaseModel):
    id: PyObjectId
    community: Optional[CommunityPreview] = None
    user: Optional[UserPreview] = None
    text: str = ""
    media: List[MediaOut] = Field(default_factory=list)
    likes: List[PyObjectId] = Field(default_factory=list)
    likes_count: int = 0
    comments_count: int = 0
    created_at: Optional[datetime] = None


class PostActionResponse(BaseModel):
    message: str
    post: PostOut


class PostLikeResponse(BaseModel):
    message: str
    likes: int
