# app/schemas/community_schema.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ._common import PyObjectId, UserPreview


class CommunityOut(BaseModel):
    """Community with creator/members populated."""
    id: PyObjectId
    name: str
    description: str
    cover_image: Optional[str] = None
    creator: Optional[UserPreview] = None
    members: List[UserPreview] = Field(default_factory=list)
    members_count: int = 0
    created_at: Optional[datetime] = None


class CommunitySummary(BaseModel):
    """Community with raw id references."""
    id: PyObjectId
    name: str
    description: str
    cover_image: Optional[str] = None
    creator: PyObjectId
    members: List[PyObjectId] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class CommunityActionResponse(BaseModel):
    message: str
    community: CommunitySummary
