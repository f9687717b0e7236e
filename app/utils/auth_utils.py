# app/utils/auth_utils.py
from __future__ import annotations

import logging
from typing import Optional

import jwt
from bson import ObjectId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..db.mongo import users_collection
from .jwt_utils import SECRET_KEY, decode_jwt_token

logger = logging.getLogger(__name__)

# Bearer scheme for typical HTTP routes (401 instead of FastAPI's default 403)
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------
def _user_id_from_token(token: str) -> str:
    if not SECRET_KEY:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="JWT secret not configured.")

    try:
        payload = decode_jwt_token(token)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    user_id = payload.get("user_id")
    if not user_id or not ObjectId.is_valid(str(user_id)):
        raise _unauthorized("Invalid token payload.")
    return str(user_id)


async def _load_user(user_id: str) -> dict:
    user = await users_collection.find_one({"_id": ObjectId(user_id)})
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return user


# ------------------------------------------------------------------
# Public dependencies
# ------------------------------------------------------------------
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
):
    """
    Validates the Bearer JWT and loads the user.
    Returns the Mongo user document (with ObjectId _id).
    """
    if not credentials or not credentials.credentials:
        raise _unauthorized("Token not provided")

    user_id = _user_id_from_token(credentials.credentials)
    return await _load_user(user_id)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
):
    """
    Optional auth: returns a user doc if a valid Bearer token is present; otherwise None.
    Never raises for missing/invalid token, useful for public endpoints.
    """
    if not credentials:
        return None

    try:
        user_id = _user_id_from_token(credentials.credentials)
        return await _load_user(user_id)
    except HTTPException as e:
        logger.debug("Ignoring optional credentials: %s", e.detail)
        return None
