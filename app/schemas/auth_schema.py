# app/schemas/auth_schema.py
from typing import Optional

from pydantic import BaseModel, field_validator

from ..models.user_model import normalize_email, normalize_username
from ._common import PyObjectId
from .user_schema import UserProfileOut


# ✅ Request Schemas
class RegisterRequest(BaseModel):
    name: str
    username: str
    email: str
    password: str

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v):
        v = str(v or "").strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("username", mode="before")
    @classmethod
    def _check_username(cls, v):
        if not v:
            raise ValueError("Username is required")
        return normalize_username(str(v))

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v):
        if not v:
            raise ValueError("Email is required")
        return normalize_email(str(v))

    @field_validator("password")
    @classmethod
    def _check_password(cls, v: str):
        if not v:
            raise ValueError("Password is required")
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _lower(cls, v):
        v = str(v or "").strip().lower()
        if not v:
            raise ValueError("Email is required")
        return v

    @field_validator("password")
    @classmethod
    def _required(cls, v: str):
        if not v:
            raise ValueError("Password is required")
        return v


# ✅ Response Schemas
class UserOut(BaseModel):
    id: PyObjectId
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    profile_picture: Optional[str] = None


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class MeResponse(BaseModel):
    user: UserProfileOut
