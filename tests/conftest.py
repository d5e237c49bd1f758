"""
Pytest configuration and shared fixtures for MONGOAT tests.

This module provides:
- Mock Motor collection/database/client fixtures
- A storage stub and an isolated model registry
- Sample schemas
"""

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
from motor.motor_asyncio import AsyncIOMotorCollection

from mongoat.core.registry import ModelRegistry
from mongoat.observability import get_metrics_collector


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: unit tests without a MongoDB server")


# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


def make_cursor(documents=None) -> MagicMock:
    """Cursor mock whose to_list() resolves to ``documents``."""
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=list(documents or []))
    return cursor


@pytest.fixture
def cursor_factory():
    """Factory for cursor mocks, for tests that set find/aggregate results."""
    return make_cursor


@pytest.fixture
def mock_mongo_collection() -> MagicMock:
    """Create a mock Motor collection."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = "users"
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="test_id"))
    collection.insert_many = AsyncMock(return_value=MagicMock(inserted_ids=["id1", "id2"]))
    collection.find_one = AsyncMock(return_value=None)
    collection.find = MagicMock(return_value=make_cursor())
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.update_many = AsyncMock(return_value=MagicMock(modified_count=2))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=2))
    collection.count_documents = AsyncMock(return_value=0)
    collection.aggregate = MagicMock(return_value=make_cursor())
    collection.bulk_write = AsyncMock(return_value=MagicMock(inserted_count=1))
    collection.create_index = AsyncMock(return_value="test_index")
    collection.drop_indexes = AsyncMock()
    return collection


class StorageStub:
    """Minimal storage exposing get_collection(name)."""

    def __init__(self, collection: MagicMock) -> None:
        self.collection = collection
        self.requested: list[str] = []

    def get_collection(self, name: str) -> MagicMock:
        self.requested.append(name)
        return self.collection


@pytest.fixture
def storage(mock_mongo_collection: MagicMock) -> StorageStub:
    return StorageStub(mock_mongo_collection)


@pytest.fixture
def registry(storage: StorageStub) -> ModelRegistry:
    """An isolated registry per test."""
    return ModelRegistry(storage)


@pytest.fixture
def mock_mongo_database(mock_mongo_collection: MagicMock) -> MagicMock:
    """Create a mock Motor database returning ``mock_mongo_collection`` for any name."""
    db = MagicMock()
    db.name = "test_db"
    db.__getitem__.return_value = mock_mongo_collection
    db.list_collection_names = AsyncMock(return_value=[])
    db.create_collection = AsyncMock()
    db.command = AsyncMock(return_value={"ok": 1})
    return db


@pytest.fixture
def mock_mongo_client(mock_mongo_database: MagicMock) -> MagicMock:
    """Create a mock Motor client."""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.__getitem__.return_value = mock_mongo_database
    return client


@pytest.fixture(autouse=True)
def reset_metrics():
    """Keep the global metrics collector isolated between tests."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


# ============================================================================
# SAMPLE DATA
# ============================================================================


@pytest.fixture
def user_schema() -> Dict[str, Any]:
    """A user schema with a nested address and an array of tags."""
    return {
        "bsonType": "object",
        "properties": {
            "username": {"bsonType": "string", "description": "Username of the user"},
            "password": {"bsonType": "string", "description": "Password of the user"},
            "mail": {
                "bsonType": "string",
                "description": "Mail of the user",
                "pattern": "^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\\.[a-zA-Z0-9-.]+$",
            },
            "address": {
                "bsonType": "object",
                "properties": {
                    "street": {"bsonType": "string"},
                    "geo": {
                        "bsonType": "object",
                        "properties": {"lat": {"bsonType": "double"}},
                    },
                },
            },
            "tags": {
                "bsonType": "array",
                "items": {
                    "bsonType": "object",
                    "properties": {"label": {"bsonType": "string"}},
                },
            },
            "insertedAt": {"bsonType": "date", "description": "Date of the user creation"},
        },
        "required": ["username", "password", "mail"],
    }
