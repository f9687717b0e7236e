import pytest

from app.db import mongo
from app.scripts.seed_communities import DEMO_COMMUNITIES, seed_demo_data
from app.utils.hashing import verify_password


@pytest.mark.asyncio
async def test_seed_replaces_users_and_communities(db, make_user):
    await make_user("leftover")

    result = await seed_demo_data()

    assert result["communities"] == len(DEMO_COMMUNITIES)
    [admin] = [u async for u in mongo.users_collection.find({})]
    assert admin["email"] == "admin@example.com"
    assert verify_password("admin123", admin["password"])

    communities = [c async for c in mongo.communities_collection.find({})]
    assert sorted(c["name"] for c in communities) == sorted(c["name"] for c in DEMO_COMMUNITIES)
    assert all(c["members"] == [admin["_id"]] for c in communities)
