# app/scripts/seed_communities.py
"""Dev-only: wipe users/communities and insert a demo admin with three communities."""
import asyncio
import logging

from app.db.mongo import communities_collection, init_db_indexes, users_collection
from app.models.community_model import CommunityModel
from app.models.user_model import UserModel
from app.utils.hashing import hash_password

logger = logging.getLogger(__name__)

DEMO_COMMUNITIES = [
    {"name": "Desarrollo Web", "description": "Comunidad para aprender desarrollo web"},
    {"name": "Programación en Python", "description": "Grupo para compartir proyectos en Python"},
    {"name": "Emprendedores Tech", "description": "Comunidad de emprendedores tecnológicos"},
]


async def seed_demo_data() -> dict:
    await communities_collection.delete_many({})
    await users_collection.delete_many({})
    await init_db_indexes()

    admin = UserModel(
        name="Admin",
        username="adminuser",
        email="admin@example.com",
        password=hash_password("admin123"),
    )
    result = await users_collection.insert_one(admin.to_document())
    admin_id = result.inserted_id

    docs = [
        CommunityModel(
            name=c["name"],
            description=c["description"],
            cover_image="https://via.placeholder.com/300",
            creator=admin_id,
            members=[admin_id],
        ).to_document()
        for c in DEMO_COMMUNITIES
    ]
    await communities_collection.insert_many(docs)
    return {"admin_id": str(admin_id), "communities": len(docs)}


async def main():
    result = await seed_demo_data()
    logger.info("Seeded admin %s with %d communities", result["admin_id"], result["communities"])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
