# app/schemas/comment_schema.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ._common import PyObjectId, UserPreview


class CommentCreateRequest(BaseModel):
    content: str
    parent_comment_id: Optional[PyObjectId] = None

    @field_validator("content", mode="before")
    @classmethod
    def _check_content(cls, v):
        v = str(v or "").strip()
        if not v:
            raise ValueError("Comment content is required")
        return v


class CommentOut(BaseModel):
    id: PyObjectId
    post: PyObjectId
    user: Optional[UserPreview] = None
    content: str
    parent_comment: Optional[PyObjectId] = None
    likes: List[PyObjectId] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    replies: List[CommentOut] = Field(default_factory=list)


class CommentListResponse(BaseModel):
    message: str
    comments: List[CommentOut]


class CommentActionResponse(BaseModel):
    message: str
    comment: CommentOut


class CommentLikes(BaseModel):
    id: PyObjectId
    likes: List[PyObjectId]


class CommentLikeResponse(BaseModel):
    message: str
    comment: CommentLikes
