# app/schemas/user_schema.py
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..models.user_model import Category, ProfileBlock
from ._common import PyObjectId


class UserProfileOut(BaseModel):
    id: PyObjectId
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    profile_picture: Optional[str] = None
    banner_image: Optional[str] = None
    bio: str = ""
    category: str = ""
    links: List[str] = Field(default_factory=list)
    profile_blocks: List[ProfileBlock] = Field(default_factory=list)
    subscription_price: float = 0


class ProfileUpdateRequest(BaseModel):
    username: Optional[str] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    banner_image: Optional[str] = None
    category: Optional[Category] = None
    links: Optional[Union[List[str], str]] = None
    subscription_price: Optional[float] = None

    @field_validator("username", "bio", "profile_picture", "banner_image", mode="before")
    @classmethod
    def _trim(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("links", mode="after")
    @classmethod
    def _split_links(cls, v):
        # Accept "a.com, b.com" as well as a list
        if v is None:
            return None
        if isinstance(v, str):
            return [link.strip() for link in v.split(",") if link.strip()]
        return [link.strip() for link in v if link and link.strip()]


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserProfileOut


class ProfileBlocksRequest(BaseModel):
    profile_blocks: List[ProfileBlock]


class ProfileBlocksResponse(BaseModel):
    message: str
    profile_blocks: List[ProfileBlock]


class ProfilePictureResponse(BaseModel):
    message: str
    profile_picture: str


class BannerImageResponse(BaseModel):
    message: str
    banner_image: str


class ImageUploadResponse(BaseModel):
    message: str
    url: str
