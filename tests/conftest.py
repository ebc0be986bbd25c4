"""
Pytest configuration and shared fixtures for MONGOISH tests.

This module provides:
- Client fixtures in each lifecycle state
- A recording engine double for delegation tests
- Metrics isolation between tests
"""

from typing import Any, AsyncGenerator, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from mongoish import MemoryEngine, MongoishClient
from mongoish.database import Collection, Database
from mongoish.observability import get_metrics_collector

TEST_URL = "mongodb://localhost:27017"


# ============================================================================
# ENGINE DOUBLES
# ============================================================================


class RecordingEngine:
    """
    Engine double whose operations are AsyncMocks.

    Every instance is appended to ``RecordingEngine.instances`` so tests can
    reach the engine behind a collection.
    """

    NAME = "recording"
    VERSION = "1.2.3"
    instances: List["RecordingEngine"] = []

    def __init__(self) -> None:
        self.stored: List[Dict[str, Any]] = []
        self.insert_one = AsyncMock(side_effect=self._insert_one)
        self.insert_many = AsyncMock(side_effect=self._insert_many)
        self.count = AsyncMock(return_value=0)
        self.find = MagicMock(return_value=MagicMock(to_list=AsyncMock(return_value=[])))
        RecordingEngine.instances.append(self)

    async def _insert_one(self, document):
        stored = {**document, "_id": document.get("_id") or f"gen{len(self.stored)}"}
        self.stored.append(stored)
        return [stored]

    async def _insert_many(self, documents):
        return [(await self._insert_one(document))[0] for document in documents]


@pytest.fixture(autouse=True)
def reset_state():
    """Isolate global metrics and engine registries between tests."""
    get_metrics_collector().reset()
    RecordingEngine.instances = []
    yield
    get_metrics_collector().reset()


# ============================================================================
# CLIENT FIXTURES
# ============================================================================


@pytest.fixture
def unbound_client() -> MongoishClient:
    """A client with no engine bound."""
    return MongoishClient(TEST_URL)


@pytest.fixture
def bound_client() -> MongoishClient:
    """A client bound to MemoryEngine, not yet connected."""
    client = MongoishClient(TEST_URL)
    client.bind_engine(MemoryEngine)
    return client


@pytest_asyncio.fixture
async def connected_client(bound_client: MongoishClient) -> AsyncGenerator[MongoishClient, None]:
    """A connected client bound to MemoryEngine."""
    await bound_client.connect()
    yield bound_client
    if bound_client.is_connected:
        await bound_client.close()


@pytest.fixture
def recording_engine() -> type:
    """The RecordingEngine class, for binding and reaching created instances."""
    return RecordingEngine


@pytest_asyncio.fixture
async def recording_client() -> AsyncGenerator[MongoishClient, None]:
    """A connected client bound to RecordingEngine."""
    client = MongoishClient(TEST_URL)
    client.bind_engine(RecordingEngine)
    await client.connect()
    yield client


@pytest.fixture
def database(connected_client: MongoishClient) -> Database:
    return connected_client.get_database("test_db")


@pytest.fixture
def collection(database: Database) -> Collection:
    return database.get_collection("test_collection")
