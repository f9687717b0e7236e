# app/db/mongo.py
import logging
import os

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

load_dotenv()

logger = logging.getLogger(__name__)

MONGO_URL = os.getenv("MONGODB_URL")
if not MONGO_URL:
    raise RuntimeError("MONGODB_URL env var is not set")

client = AsyncIOMotorClient(MONGO_URL)
db = client[os.getenv("MONGODB_DB", "allies")]

# Collections
users_collection = db["users"]
communities_collection = db["communities"]
posts_collection = db["posts"]
comments_collection = db["comments"]
subscriptions_collection = db["subscriptions"]
allies_collection = db["allies"]                     # one undirected edge per pair_key

ALL_COLLECTIONS = (
    users_collection,
    communities_collection,
    posts_collection,
    comments_collection,
    subscriptions_collection,
    allies_collection,
)


# Call once at startup to ensure indexes exist.
async def init_db_indexes() -> None:
    # Users: unique email + username (both stored lowercase)
    await users_collection.create_index("email", unique=True)
    await users_collection.create_index("username", unique=True)

    # Communities: name is the public handle
    await communities_collection.create_index("name", unique=True)
    await communities_collection.create_index("members")

    # Posts: community timeline, author timeline
    await posts_collection.create_index([("community", 1), ("created_at", -1)])
    await posts_collection.create_index([("user", 1), ("created_at", -1)])

    # Comments per post
    await comments_collection.create_index([("post", 1), ("created_at", -1)])

    # Subscriptions: active lookup per (user, community)
    await subscriptions_collection.create_index([("user", 1), ("community", 1), ("status", 1)])

    # Allies: one edge per unordered pair
    await allies_collection.create_index("pair_key", unique=True, name="ally_pair_unique")
    await allies_collection.create_index("user1")
    await allies_collection.create_index("user2")

    logger.info("MongoDB indexes ensured")
