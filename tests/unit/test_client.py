"""
Unit tests for MongoishClient.

Tests construction, engine binding, the connection lifecycle and
database access gating.
"""

import asyncio

import pytest

from mongoish import (ClientConfig, ConfigurationError, MemoryEngine,
                      MongoishClient, __version__)
from mongoish.database import Database
from mongoish.exceptions import (AlreadyBoundError, EngineNotBoundError,
                                 InvalidEngineError, NotConnectedError,
                                 ValidationError)
from mongoish.observability import get_metrics_collector

TEST_URL = "mongodb://localhost:27017"


class TestClientConstruction:
    """Test client construction."""

    def test_starts_unbound_and_disconnected(self, unbound_client):
        assert unbound_client.url == TEST_URL
        assert unbound_client.engine_name == ""
        assert unbound_client.engine_version == ""
        assert unbound_client.is_connected is False

    def test_invalid_url_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            MongoishClient("http://localhost")
        assert str(exc_info.value) == (
            "MongoishClient(): `url` 'http://localhost' fails /^mongodb://[!-\\[\\]-~]+$/"
        )

    def test_missing_url_rejected(self):
        with pytest.raises(ValidationError, match="`url` is None not type 'str'"):
            MongoishClient(None)

    def test_repr(self, bound_client):
        assert repr(bound_client) == (
            f"MongoishClient(url='{TEST_URL}', engine='memory', connected=False)"
        )


class TestEngineBinding:
    """Test bind_engine()."""

    def test_bind_exposes_identifiers(self, unbound_client, recording_engine):
        unbound_client.bind_engine(recording_engine)
        assert unbound_client.engine_name == "recording"
        assert unbound_client.engine_version == "1.2.3"

    def test_memory_engine_identifiers(self, bound_client):
        assert bound_client.engine_name == "memory"
        assert bound_client.engine_version == __version__

    def test_second_bind_rejected(self, bound_client, recording_engine):
        with pytest.raises(AlreadyBoundError) as exc_info:
            bound_client.bind_engine(recording_engine)
        assert str(exc_info.value) == (
            "bind_engine(): A database engine has already been bound, "
            "`bind_engine()` can only be called once per client"
        )
        assert bound_client.engine_name == "memory"

    def test_second_bind_rejected_even_with_same_engine(self, bound_client):
        with pytest.raises(AlreadyBoundError):
            bound_client.bind_engine(MemoryEngine)

    def test_invalid_factory_leaves_client_unbound(self, unbound_client):
        with pytest.raises(InvalidEngineError):
            unbound_client.bind_engine(None)
        assert unbound_client.engine_name == ""

        unbound_client.bind_engine(MemoryEngine)
        assert unbound_client.engine_name == "memory"


class TestConnectionLifecycle:
    """Test connect() and close()."""

    def test_connect_requires_engine(self, unbound_client):
        with pytest.raises(EngineNotBoundError) as exc_info:
            unbound_client.connect()
        assert str(exc_info.value) == (
            "connect(): A real database engine must be bound, using `bind_engine()`"
        )

    def test_close_requires_engine(self, unbound_client):
        with pytest.raises(EngineNotBoundError, match=r"^close\(\): "):
            unbound_client.close()

    @pytest.mark.asyncio
    async def test_connect(self, bound_client):
        await bound_client.connect()
        assert bound_client.is_connected is True
        assert get_metrics_collector().calls("client.connect") == 1

    @pytest.mark.asyncio
    async def test_not_connected_until_awaited(self, bound_client):
        pending = bound_client.connect()
        assert bound_client.is_connected is False
        with pytest.raises(NotConnectedError):
            bound_client.get_database("animals")
        await pending
        assert bound_client.is_connected is True

    @pytest.mark.asyncio
    async def test_scheduled_connect_completes_later(self, bound_client):
        task = asyncio.ensure_future(bound_client.connect())
        with pytest.raises(NotConnectedError, match="Client must be connected"):
            bound_client.get_database("animals")
        await task
        assert isinstance(bound_client.get_database("animals"), Database)

    @pytest.mark.asyncio
    async def test_held_handles_fail_until_reconnect_awaited(self, connected_client):
        db = connected_client.get_database("animals")
        frogs = db.get_collection("frogs")
        await connected_client.close()

        pending = connected_client.connect()
        with pytest.raises(NotConnectedError, match=r"^get_collection\(\): "):
            db.get_collection("frogs")
        with pytest.raises(NotConnectedError, match=r"^insert_one\(\): "):
            frogs.insert_one({"_id": "a"})
        with pytest.raises(NotConnectedError, match=r"^insert_many\(\): "):
            frogs.insert_many([{"_id": "a"}])
        with pytest.raises(NotConnectedError, match=r"^find\(\): "):
            frogs.find()
        with pytest.raises(NotConnectedError, match=r"^count_documents\(\): "):
            frogs.count_documents()

        await pending
        await frogs.insert_one({"_id": "a"})
        assert await frogs.find().to_list() == [{"_id": "a"}]

    @pytest.mark.asyncio
    async def test_close_disconnects_immediately(self, connected_client):
        pending = connected_client.close()
        assert connected_client.is_connected is False
        await pending
        assert connected_client.is_connected is False
        assert get_metrics_collector().calls("client.close") == 1

    @pytest.mark.asyncio
    async def test_close_when_disconnected_is_allowed(self, bound_client):
        await bound_client.close()
        assert bound_client.is_connected is False

    @pytest.mark.asyncio
    async def test_reconnect_after_close(self, connected_client):
        frogs = connected_client.get_database("animals").get_collection("frogs")
        await connected_client.close()
        await connected_client.connect()
        result = await frogs.insert_one({"_id": "a"})
        assert result["inserted_id"] == "a"

    @pytest.mark.asyncio
    async def test_async_context_manager(self, bound_client):
        async with bound_client as client:
            assert client is bound_client
            assert client.is_connected is True
        assert bound_client.is_connected is False


class TestGetDatabase:
    """Test get_database() gating and handles."""

    def test_requires_engine_first(self, unbound_client):
        # Engine check comes before name validation
        with pytest.raises(EngineNotBoundError, match=r"^get_database\(\): "):
            unbound_client.get_database("1_bad")

    def test_validates_name_before_connection(self, bound_client):
        with pytest.raises(ValidationError) as exc_info:
            bound_client.get_database("1_bad")
        assert str(exc_info.value) == (
            "get_database(): `name` '1_bad' fails /^[a-z][_a-z0-9]*$/"
        )

    def test_requires_connection(self, bound_client):
        with pytest.raises(NotConnectedError) as exc_info:
            bound_client.get_database("animals")
        assert str(exc_info.value) == (
            "get_database(): Client must be connected before running operations"
        )

    @pytest.mark.asyncio
    async def test_returns_new_handle_each_call(self, connected_client):
        first = connected_client.get_database("animals")
        second = connected_client.get_database("animals")
        assert first is not second
        assert first.name == second.name == "animals"
        assert first.client is connected_client

    @pytest.mark.asyncio
    async def test_subscript_access(self, connected_client):
        assert connected_client["animals"].name == "animals"


class TestFromConfig:
    """Test MongoishClient.from_config()."""

    @pytest.mark.asyncio
    async def test_binds_configured_engine(self):
        client = MongoishClient.from_config(ClientConfig(id_length=5))
        assert client.url == "mongodb://localhost:27017"
        assert client.engine_name == "memory"
        assert client.engine_version == __version__

        await client.connect()
        result = await client.get_database("db").get_collection("coll").insert_one({"x": 1})
        assert len(result["inserted_id"]) == 5

    def test_reads_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("MONGOISH_URL", "mongodb://db.example:1234")
        client = MongoishClient.from_config()
        assert client.url == "mongodb://db.example:1234"

    def test_unknown_engine(self):
        with pytest.raises(ConfigurationError, match="Unknown storage engine 'postgres'"):
            MongoishClient.from_config(ClientConfig(engine="postgres"))
