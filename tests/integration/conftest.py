"""
Fixtures for repository tests against a real MongoDB.

The container starts once per session. Each test gets a fresh database
with all indexes created, dropped afterwards. Everything here is skipped
when Docker is unavailable.
"""

import uuid

import pytest
from pymongo import AsyncMongoClient

from agriloop.database import ensure_indexes
from tests.integration.containers import get_mongodb_container, stop_mongodb_container


@pytest.fixture(scope="session")
def mongodb_url():
    try:
        container = get_mongodb_container()
    except Exception as e:
        pytest.skip(f"MongoDB container unavailable: {e}")
    yield container.get_connection_url()
    stop_mongodb_container()


@pytest.fixture
async def mongo_db(mongodb_url):
    client = AsyncMongoClient(mongodb_url, tz_aware=True)
    name = f"agriloop_test_{uuid.uuid4().hex[:8]}"
    db = client[name]
    await ensure_indexes(db)
    try:
        yield db
    finally:
        await client.drop_database(name)
        await client.close()
