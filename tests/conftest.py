"""
Pytest configuration and shared fixtures for awaitable-mongo tests.

This module provides:
- Mock Motor database, collection and cursor fixtures
- Sample documents
- Metrics and environment isolation
- Testcontainers fixtures for integration tests
"""

from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorCursor, AsyncIOMotorDatabase
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

from awaitable_mongo.observability import get_metrics_collector

# ============================================================================
# MOCK MOTOR FIXTURES
# ============================================================================


@pytest.fixture
def mock_cursor() -> MagicMock:
    """Create a mock Motor cursor that materializes to two documents."""
    cursor = MagicMock(spec=AsyncIOMotorCursor)
    cursor.to_list = AsyncMock(return_value=[{"name": "a"}, {"name": "b"}])
    return cursor


@pytest.fixture
def mock_collection(mock_cursor: MagicMock) -> MagicMock:
    """Create a mock Motor collection with acknowledged driver results."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = "test_collection"
    collection.insert_one = AsyncMock(
        side_effect=lambda document, **kwargs: InsertOneResult(
            document.setdefault("_id", ObjectId()), acknowledged=True
        )
    )
    collection.insert_many = AsyncMock(
        side_effect=lambda documents, **kwargs: InsertManyResult(
            [document.setdefault("_id", ObjectId()) for document in documents],
            acknowledged=True,
        )
    )
    collection.find_one = AsyncMock(return_value=None)
    # Motor's find() is synchronous and returns a cursor
    collection.find = MagicMock(return_value=mock_cursor)
    collection.update_one = AsyncMock(
        return_value=UpdateResult({"n": 1, "nModified": 1}, acknowledged=True)
    )
    collection.update_many = AsyncMock(
        return_value=UpdateResult({"n": 2, "nModified": 2}, acknowledged=True)
    )
    collection.delete_one = AsyncMock(return_value=DeleteResult({"n": 1}, acknowledged=True))
    collection.delete_many = AsyncMock(return_value=DeleteResult({"n": 2}, acknowledged=True))
    return collection


@pytest.fixture
def mock_database(mock_collection: MagicMock) -> MagicMock:
    """Create a mock Motor database whose every collection is ``mock_collection``."""
    db = MagicMock(spec=AsyncIOMotorDatabase)
    db.name = "test_db"
    db.__getitem__.return_value = mock_collection
    return db


# ============================================================================
# TEST DATA FACTORIES
# ============================================================================


@pytest.fixture
def sample_document() -> Dict[str, Any]:
    """Provide a single document without an identifier."""
    return {"name": "a", "status": "active"}


@pytest.fixture
def sample_documents() -> List[Dict[str, Any]]:
    """Provide a batch of documents without identifiers."""
    return [{"name": "a"}, {"name": "b"}, {"name": "c"}]


# ============================================================================
# ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty global metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables before each test."""
    env_vars_to_clear = [
        "MONGO_URI",
        "DB_NAME",
        "MONGO_SERVER_SELECTION_TIMEOUT_MS",
        "MONGO_APP_NAME",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a MongoDB container for integration tests.

    Session-scoped: the container starts once and is reused by every
    integration test.
    """
    try:
        from testcontainers.mongodb import MongoDbContainer
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    try:
        container = MongoDbContainer(image="mongo:7.0")
        container.start()
    except Exception as e:  # Docker unavailable
        pytest.skip(f"MongoDB container could not be started: {e}")

    yield container
    container.stop()


@pytest.fixture
def mongodb_connection_string(mongodb_container) -> str:
    """Connection string for the test container using its exposed port."""
    return mongodb_container.get_connection_url()


@pytest.fixture
async def real_db(mongodb_connection_string):
    """
    Connect to the test container through ``connect``.

    Uses a unique database per test and drops it afterwards.
    """
    from bson import ObjectId

    from awaitable_mongo import connect

    db_name = f"test_db_{ObjectId()}"
    db = await connect(mongodb_connection_string, db_name)

    yield db

    await db.client.drop_database(db_name)
    db.client.close()
