import os
from datetime import timedelta

import jwt
from dotenv import load_dotenv

from .datetime_utils import now_utc

load_dotenv()


SECRET_KEY = os.getenv("JWT_SECRET_KEY") or os.getenv("JWT_SECRET") or ""
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
TOKEN_LIFETIME = timedelta(days=7)


def create_jwt_token(data: dict, expires_delta: timedelta = TOKEN_LIFETIME):
    to_encode = data.copy()
    expire = now_utc() + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_jwt_token(token: str) -> dict:
    """Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
