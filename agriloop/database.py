"""
MongoDB client lifecycle and index management.

One ``AsyncMongoClient`` is shared by the whole process. It is opened in
the application lifespan and closed on shutdown.
"""

from typing import Optional

import structlog
from pymongo import ASCENDING, DESCENDING, GEOSPHERE, AsyncMongoClient, IndexModel
from pymongo.asynchronous.database import AsyncDatabase

from agriloop.config import get_settings

logger = structlog.get_logger(__name__)

USERS = "users"
WASTE_LISTINGS = "waste_listings"
ORDERS = "orders"
SHOWCASES = "showcases"

INDEXES = {
    USERS: [
        IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
        IndexModel([("role", ASCENDING)], name="role"),
    ],
    WASTE_LISTINGS: [
        IndexModel([("location.geo", GEOSPHERE)], name="location_geo_2dsphere"),
        IndexModel([("availability.status", ASCENDING), ("created_at", DESCENDING)], name="status_recent"),
        IndexModel([("farmer", ASCENDING), ("created_at", DESCENDING)], name="farmer_recent"),
        IndexModel([("waste_type", ASCENDING)], name="waste_type"),
        IndexModel([("price.amount", ASCENDING)], name="price_amount"),
    ],
    ORDERS: [
        IndexModel([("farmer", ASCENDING), ("created_at", DESCENDING)], name="farmer_recent"),
        IndexModel([("creator", ASCENDING), ("created_at", DESCENDING)], name="creator_recent"),
        IndexModel([("waste_listing", ASCENDING)], name="waste_listing"),
    ],
    SHOWCASES: [
        IndexModel([("category", ASCENDING), ("created_at", DESCENDING)], name="category_recent"),
        IndexModel([("creator", ASCENDING), ("created_at", DESCENDING)], name="creator_recent"),
    ],
}

_client: Optional[AsyncMongoClient] = None


async def init_mongo() -> AsyncMongoClient:
    """
    Initialize the MongoDB client.

    Should be called during application startup. Verifies connectivity
    with a ping and creates indexes when enabled.

    Returns:
        The shared client
    """
    global _client

    if _client is not None:
        return _client

    settings = get_settings()

    try:
        _client = AsyncMongoClient(
            settings.mongodb_url,
            maxPoolSize=settings.mongodb_max_pool_size,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
            tz_aware=True,
        )
        await _client.admin.command("ping")

        logger.info(
            "mongodb_connected",
            database=settings.mongodb_database,
            host=settings.mongodb_url.split("@")[-1]
        )

        if settings.mongodb_create_indexes:
            await ensure_indexes(_client[settings.mongodb_database])

        return _client

    except Exception as e:
        logger.error("mongodb_init_failed", error=str(e))
        if _client is not None:
            await _client.close()
            _client = None
        raise


async def close_mongo():
    """
    Close the MongoDB client.

    Should be called during application shutdown.
    """
    global _client

    if _client is not None:
        await _client.close()
        logger.info("mongodb_closed")
        _client = None


def get_client() -> AsyncMongoClient:
    """
    Get the shared client.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _client is None:
        logger.error("mongodb_not_initialized")
        raise RuntimeError(
            "MongoDB client not initialized. Call init_mongo() during startup."
        )
    return _client


def get_database() -> AsyncDatabase:
    """Database handle for the configured database name."""
    return get_client()[get_settings().mongodb_database]


async def ping() -> bool:
    """True when the server answers a ping."""
    try:
        await get_client().admin.command("ping")
        return True
    except Exception as e:
        logger.error("mongodb_ping_failed", error=str(e))
        return False


async def ensure_indexes(db: AsyncDatabase) -> None:
    """Create every collection index. Idempotent."""
    for collection_name, indexes in INDEXES.items():
        names = await db[collection_name].create_indexes(indexes)
        logger.info("indexes_ensured", collection=collection_name, indexes=names)
