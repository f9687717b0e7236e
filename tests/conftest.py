"""
Shared pytest fixtures.

MongoDB is replaced by mongomock-motor before any app module is imported, so the
module-level collections in app.db.mongo are in-memory and need no server.

Function-scoped fixtures:
    db           : empties every collection before and after the test
    client       : httpx AsyncClient bound to the FastAPI app
    make_user    : factory inserting a user and returning (doc, token)
"""

import os
import tempfile

# Environment must be in place BEFORE app imports
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["MONGODB_DB"] = "allies_test"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-real"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="allies_uploads_")
os.environ["PUBLIC_BASE_URL"] = "http://test"
os.environ["LOG_LEVEL"] = "WARNING"

import motor.motor_asyncio  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402

motor.motor_asyncio.AsyncIOMotorClient = AsyncMongoMockClient

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.db import mongo  # noqa: E402
from app.models.user_model import UserModel  # noqa: E402
from app.utils.hashing import hash_password  # noqa: E402
from app.utils.jwt_utils import create_jwt_token  # noqa: E402

DEFAULT_PASSWORD = "secret123"


async def _wipe():
    for collection in mongo.ALL_COLLECTIONS:
        await collection.delete_many({})


@pytest_asyncio.fixture
async def db():
    await _wipe()
    yield mongo
    await _wipe()


@pytest_asyncio.fixture
async def client(db):
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture(scope="session")
def password_hash():
    # Hashing once keeps the suite fast
    return hash_password(DEFAULT_PASSWORD)


@pytest.fixture
def make_user(db, password_hash):
    """
    Usage:
        user, token = await make_user("alice")
    """
    async def _make(username: str, name: str = None, **extra):
        doc = UserModel(
            name=name or username.capitalize(),
            username=username,
            email=f"{username}@example.com",
            password=password_hash,
            **extra,
        ).to_document()
        result = await mongo.users_collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc, create_jwt_token({"user_id": str(result.inserted_id)})

    return _make


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
