"""
Pikecape Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Inventory (all function-scoped):
    ├── mock_collection: AsyncCollection stand-in built from unittest.mock
    ├── duck_repository: DuckRepository over mock_collection, ids pinned to "u1"
    ├── memory_collection: InMemoryCollection holding real state between calls
    ├── memory_repository: DuckRepository over memory_collection, ids u1, u2, ...
    ├── mock_repository: AsyncMock(spec=DuckRepository) for route-only tests
    └── test_client: HTTPX AsyncClient talking to the ASGI app in-process

No MongoDB server is needed: the collection is mocked at the driver boundary,
the same seam the repository receives through dependency injection.
"""

import os

# Override settings for testing BEFORE any pikecape imports
os.environ["MONGO_URL"] = "mongodb://localhost:27017"
os.environ["MONGO_DATABASE"] = "pikecape_test"
os.environ["LOG_LEVEL"] = "WARNING"

import itertools
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pymongo.errors import DuplicateKeyError

from pikecape.repositories.duck_repository import DuckRepository

UID_1 = "u1"


@pytest.fixture
def mock_collection():
    """
    Provides a mock async MongoDB collection.

    `find` is synchronous in the driver and returns a cursor whose
    `to_list` is awaited; every other method is awaited directly.

    Usage:
        mock_collection.find_one.return_value = {"_id": "u1", "name": "Duey"}
    """
    collection = MagicMock()
    collection.find.return_value.to_list = AsyncMock(return_value=[])
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(
        return_value=MagicMock(acknowledged=True, inserted_id=UID_1)
    )
    collection.update_one = AsyncMock(
        return_value=MagicMock(acknowledged=True, matched_count=1, modified_count=1)
    )
    collection.delete_one = AsyncMock(
        return_value=MagicMock(acknowledged=True, deleted_count=1)
    )
    return collection


@pytest.fixture
def duck_repository(mock_collection):
    return DuckRepository(mock_collection, id_factory=lambda: UID_1)


class InMemoryCursor:
    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        return self._documents if length is None else self._documents[:length]


class InMemoryCollection:
    """
    Dict-backed collection keyed by `_id`.

    Supports the equality filters and `$set` updates DuckRepository issues,
    so properties that span several calls (create then read, update then
    read, delete then read) run against real state instead of stubs.
    Documents are copied in and out, like a round-trip through the driver.
    """

    def __init__(self):
        self.documents = {}

    def _matching(self, filter):
        return [
            doc for doc in self.documents.values()
            if all(doc.get(key) == value for key, value in filter.items())
        ]

    def find(self, filter):
        return InMemoryCursor([dict(doc) for doc in self._matching(filter)])

    async def find_one(self, filter):
        matches = self._matching(filter)
        return dict(matches[0]) if matches else None

    async def insert_one(self, document):
        if document["_id"] in self.documents:
            raise DuplicateKeyError(f"duplicate key: {document['_id']}")
        self.documents[document["_id"]] = dict(document)
        return SimpleNamespace(acknowledged=True, inserted_id=document["_id"])

    async def update_one(self, filter, update):
        matches = self._matching(filter)[:1]
        modified = 0
        for doc in matches:
            changes = update["$set"]
            if any(doc.get(key) != value for key, value in changes.items()):
                doc.update(changes)
                modified += 1
        return SimpleNamespace(
            acknowledged=True, matched_count=len(matches), modified_count=modified
        )

    async def delete_one(self, filter):
        matches = self._matching(filter)[:1]
        for doc in matches:
            del self.documents[doc["_id"]]
        return SimpleNamespace(acknowledged=True, deleted_count=len(matches))


@pytest.fixture
def memory_collection():
    return InMemoryCollection()


@pytest.fixture
def memory_repository(memory_collection):
    """DuckRepository over InMemoryCollection, with ids pinned to u1, u2, ..."""
    counter = itertools.count(1)
    return DuckRepository(memory_collection, id_factory=lambda: f"u{next(counter)}")


@pytest.fixture
def mock_repository():
    return AsyncMock(spec=DuckRepository)


@pytest_asyncio.fixture
async def test_client():
    """
    Provides an async HTTP test client for endpoint testing.

    The lifespan is not run, so no database connection is attempted; tests
    inject a repository with `override_repository`. App exceptions are not
    re-raised into the test so the catch-all 500 handler can be asserted.
    """
    from pikecape.main import app

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def override_repository():
    """
    Returns a function that routes get_duck_repository to a given repository.

    Usage:
        override_repository(duck_repository)
    """
    from pikecape.database import get_duck_repository
    from pikecape.main import app

    def _override(repository):
        app.dependency_overrides[get_duck_repository] = lambda: repository
        return repository

    yield _override
    app.dependency_overrides.clear()
