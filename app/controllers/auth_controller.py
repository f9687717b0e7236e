import logging
from typing import Dict

from fastapi import HTTPException, status
from pymongo.errors import DuplicateKeyError

from ..db.mongo import users_collection
from ..models.user_model import UserModel
from ..schemas.auth_schema import AuthResponse, MeResponse, RegisterRequest, UserOut
from ..services import media_service
from ..utils.datetime_utils import now_utc
from ..utils.hashing import hash_password, verify_password
from ..utils.jwt_utils import create_jwt_token
from .user_controller import user_profile

logger = logging.getLogger(__name__)


def _user_out(doc: dict) -> UserOut:
    return UserOut(
        id=str(doc["_id"]),
        name=doc.get("name"),
        username=doc.get("username"),
        email=doc.get("email"),
        profile_picture=media_service.public_url(doc.get("profile_picture")),
    )


def _already_exists(details: Dict[str, str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "User already exists", "details": details},
    )


# -----------------------
# Register
# -----------------------
async def register_user(payload: RegisterRequest) -> AuthResponse:
    # Email and username may collide with two different users
    cursor = users_collection.find(
        {"$or": [{"email": payload.email}, {"username": payload.username}]},
        {"email": 1, "username": 1},
    ).limit(2)
    details: Dict[str, str] = {}
    async for existing in cursor:
        if existing.get("email") == payload.email:
            details["email"] = "This email is already registered"
        if existing.get("username") == payload.username:
            details["username"] = "This username is already in use"
    if details:
        raise _already_exists(details)

    user = UserModel(
        name=payload.name,
        username=payload.username,
        email=payload.email,
        password=hash_password(payload.password),
    )
    doc = user.to_document()

    try:
        result = await users_collection.insert_one(doc)
    except DuplicateKeyError:
        # Lost a race against a concurrent registration; the unique index caught it
        raise _already_exists({"email": "This email or username is already registered"})

    doc["_id"] = result.inserted_id
    logger.info("Registered user %s (@%s)", result.inserted_id, payload.username)

    token = create_jwt_token({"user_id": str(result.inserted_id)})
    return AuthResponse(message="User registered", token=token, user=_user_out(doc))


# -----------------------
# Login with email & password
# -----------------------
async def login_with_email_password(email: str, password: str) -> AuthResponse:
    user = await users_collection.find_one({"email": email})
    if not user or not verify_password(password, user.get("password", "")):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    await users_collection.update_one({"_id": user["_id"]}, {"$set": {"last_login": now_utc()}})

    token = create_jwt_token({"user_id": str(user["_id"])})
    return AuthResponse(message="Login successful", token=token, user=_user_out(user))


# -----------------------
# Get the authenticated user (for /auth/me)
# -----------------------
async def get_authenticated_user(current_user: dict) -> MeResponse:
    return MeResponse(user=user_profile(current_user))
