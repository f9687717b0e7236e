# app/models/user_model.py
import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator
from typing_extensions import Annotated
from pydantic.functional_validators import BeforeValidator

from ..utils.datetime_utils import now_utc

# Converts ObjectId to string before validation
PyObjectId = Annotated[str, BeforeValidator(lambda x: str(x))]

DEFAULT_PROFILE_PICTURE = "https://miro.medium.com/v2/resize:fit:1400/format:webp/0*0JcYeLzvORp67c6w.jpg"
DEFAULT_BANNER_IMAGE = (
    "https://cdn.venngage.com/template/thumbnail/small/47096c29-b33e-4950-a7ba-aa7ac4215872.webp"
)

USERNAME_MIN_LEN = 3
USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LINK_RE = re.compile(r"^(https?://)?[\da-z-]+(\.[\da-z-]+)*\.[a-z]{2,6}(/[/\w .-]*)?$")
LINK_MAX_LEN = 2048

Category = Literal["", "Música", "Arte", "Deportes", "Tecnología", "Educación", "Entretenimiento", "Otro"]
BlockType = Literal["text", "image", "gallery", "video", "link", "embed", "social", "quote", "button"]


def normalize_username(value: str) -> str:
    u = (value or "").strip().lower()
    if len(u) < USERNAME_MIN_LEN:
        raise ValueError(f"username must be at least {USERNAME_MIN_LEN} characters")
    if not USERNAME_RE.match(u):
        raise ValueError("username can contain only letters, numbers, and underscore")
    return u


def normalize_email(value: str) -> str:
    e = (value or "").strip().lower()
    if not EMAIL_RE.match(e):
        raise ValueError("Please enter a valid email")
    return e


class ProfileBlock(BaseModel):
    type: BlockType
    content: Any = None
    position: int = 0
    styles: Dict[str, Any] = Field(default_factory=dict)


class UserModel(BaseModel):
    id: Optional[PyObjectId] = Field(alias="_id", default=None)
    name: str = Field(min_length=2)
    username: str
    email: str
    password: str = Field(min_length=6)
    profile_picture: str = DEFAULT_PROFILE_PICTURE
    banner_image: str = DEFAULT_BANNER_IMAGE
    bio: str = Field(default="", max_length=500)
    category: Category = ""
    links: List[str] = Field(default_factory=list)
    subscription_price: float = Field(default=0, ge=0)
    profile_blocks: List[ProfileBlock] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now_utc)
    last_login: datetime = Field(default_factory=now_utc)

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "json_encoders": {ObjectId: str},
        "extra": "ignore",
    }

    @field_validator("name", mode="before")
    @classmethod
    def _trim_name(cls, v):
        return str(v or "").strip()

    @field_validator("username", mode="before")
    @classmethod
    def _check_username(cls, v):
        return normalize_username(str(v or ""))

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v):
        return normalize_email(str(v or ""))

    @field_validator("links")
    @classmethod
    def _check_links(cls, v: List[str]):
        for link in v:
            if len(link) > LINK_MAX_LEN:
                raise ValueError(f"Links must be at most {LINK_MAX_LEN} characters")
            if not LINK_RE.match(link):
                raise ValueError(f"{link} is not a valid URL")
        return v

    def to_document(self) -> dict:
        return self.model_dump(exclude={"id"})
