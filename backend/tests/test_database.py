"""
Pikecape Backend - Database Lifecycle & Health Tests
=====================================================

What:  Tests for connect_database/close_database, the lifespan wiring and
       the /health endpoint.
How:   AsyncMongoClient is patched, so no MongoDB server is contacted.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from pikecape.config import Settings
from pikecape.database import DatabaseHandle, close_database, connect_database
from pikecape.exceptions import DatabaseInitializationError
from pikecape.repositories.duck_repository import DuckRepository


def make_client(ping_side_effect=None):
    database = MagicMock()
    database.command = AsyncMock(return_value={"ok": 1.0}, side_effect=ping_side_effect)
    client = MagicMock()
    client.__getitem__.return_value = database
    client.close = AsyncMock()
    return client, database


class TestConnectDatabase:

    def setup_method(self):
        self.settings = Settings(mongo_url="mongodb://db.test:27017", mongo_database="pikecape")

    @pytest.mark.asyncio
    async def test_connect_pings_and_returns_handle(self):
        client, database = make_client()
        with patch("pikecape.database.AsyncMongoClient", return_value=client) as client_cls:
            handle = await connect_database(self.settings)

        client_cls.assert_called_once_with(
            "mongodb://db.test:27017",
            serverSelectionTimeoutMS=self.settings.mongo_server_selection_timeout_ms,
        )
        client.__getitem__.assert_called_once_with("pikecape")
        database.command.assert_awaited_once_with("ping")
        assert handle.client is client
        assert handle.database is database

    @pytest.mark.asyncio
    async def test_connect_failure_raises_initialization_error(self):
        outage = ServerSelectionTimeoutError("no servers available")
        client, _ = make_client(ping_side_effect=outage)
        with patch("pikecape.database.AsyncMongoClient", return_value=client):
            with pytest.raises(DatabaseInitializationError) as exc_info:
                await connect_database(self.settings)

        assert exc_info.value.message == "Database initialization failed"
        assert exc_info.value.__cause__ is outage
        assert exc_info.value.context["error_type"] == "ServerSelectionTimeoutError"
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_url_raises_initialization_error(self):
        with patch("pikecape.database.AsyncMongoClient", side_effect=ValueError("bad url")):
            with pytest.raises(DatabaseInitializationError):
                await connect_database(self.settings)

    @pytest.mark.asyncio
    async def test_close_database(self):
        client, database = make_client()
        await close_database(DatabaseHandle(client=client, database=database))
        client.close.assert_awaited_once()

    def test_collection_lookup(self):
        client, database = make_client()
        handle = DatabaseHandle(client=client, database=database)

        handle.collection("duck")

        database.__getitem__.assert_called_once_with("duck")


class TestLifespan:

    @pytest.mark.asyncio
    async def test_lifespan_builds_repository_and_closes(self):
        from pikecape.main import app, lifespan

        handle = MagicMock()
        handle.collection.return_value = MagicMock(name="duck_collection")
        with patch("pikecape.main.setup_logging"), \
             patch("pikecape.main.connect_database", AsyncMock(return_value=handle)), \
             patch("pikecape.main.close_database", AsyncMock()) as close_mock:
            async with lifespan(app):
                repository = app.state.duck_repository
                assert isinstance(repository, DuckRepository)
                assert repository.collection is handle.collection.return_value
                handle.collection.assert_called_once_with("duck")
                assert app.state.database is handle

            close_mock.assert_awaited_once_with(handle)

        assert app.state.duck_repository is None
        assert app.state.database is None

    @pytest.mark.asyncio
    async def test_lifespan_aborts_when_database_unreachable(self):
        from pikecape.main import app, lifespan

        failing = AsyncMock(side_effect=DatabaseInitializationError())
        with patch("pikecape.main.setup_logging"), \
             patch("pikecape.main.connect_database", failing):
            with pytest.raises(DatabaseInitializationError):
                async with lifespan(app):
                    pass


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_without_database(self, test_client):
        from pikecape.main import app

        app.state.database = None
        response = await test_client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"

    @pytest.mark.asyncio
    async def test_health_with_database(self, test_client):
        from pikecape import __version__
        from pikecape.main import app

        app.state.database = MagicMock(ping=AsyncMock(return_value=True))
        try:
            response = await test_client.get("/health")
        finally:
            app.state.database = None

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"] == __version__
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_health_when_ping_fails(self, test_client):
        from pikecape.main import app

        app.state.database = MagicMock(
            ping=AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        )
        try:
            response = await test_client.get("/health")
        finally:
            app.state.database = None

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"
