"""
Pikecape Backend - Database Connection Management
==================================================

What:  Async MongoDB client lifecycle and the FastAPI repository dependency.
How:   `connect_database()` is an explicit, awaited setup step that opens an
       AsyncMongoClient, pings the server and returns a DatabaseHandle.
       The lifespan in main.py calls it, builds the DuckRepository on top of
       the handle and stores both on `app.state`.
Who:   main.py (startup/shutdown), routes (via get_duck_repository).
When:  Client is created once at startup; repositories are shared per process.

Connection Strategy:
    One AsyncMongoClient per process. The driver keeps its own connection
    pool, so every request reuses it; there is no per-request session.
    A failed startup ping raises DatabaseInitializationError; there is no
    retry or reconnection logic at this layer.
"""

import logging
from dataclasses import dataclass

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from pikecape.config import Settings
from pikecape.exceptions import DataAccessError, DatabaseInitializationError
from pikecape.repositories.duck_repository import DuckRepository

logger = logging.getLogger(__name__)


@dataclass
class DatabaseHandle:
    """A connected client plus the logical database selected from it."""

    client: AsyncMongoClient
    database: AsyncDatabase

    def collection(self, name: str) -> AsyncCollection:
        return self.database[name]

    async def ping(self) -> bool:
        """
        Lightweight round-trip used by startup and the health check.

        Raises whatever the driver raises; callers decide how to report it.
        """
        await self.database.command("ping")
        return True


async def connect_database(settings: Settings) -> DatabaseHandle:
    """
    Open the MongoDB client and verify the server is reachable.

    Args:
        settings: Application settings (URL, database name, timeouts)

    Returns:
        DatabaseHandle ready to hand out collections

    Raises:
        DatabaseInitializationError: the client could not be created or the
            ping failed. The driver exception is chained as __cause__.
    """
    client = None
    try:
        client = AsyncMongoClient(
            settings.mongo_url,
            serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        )
        handle = DatabaseHandle(client=client, database=client[settings.mongo_database])
        await handle.ping()
    except Exception as e:
        logger.error("Failed to connect to MongoDB at %s: %s", settings.mongo_url, e)
        if client is not None:
            await client.close()
        raise DatabaseInitializationError(
            context={"mongo_url": settings.mongo_url, "error_type": type(e).__name__},
        ) from e

    logger.info(
        "Connected to MongoDB at %s (database=%s)",
        settings.mongo_url,
        settings.mongo_database,
    )
    return handle


async def close_database(handle: DatabaseHandle) -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await handle.client.close()
    logger.info("MongoDB connection closed")


# ── Repository Dependency ─────────────────────────────────────────────────
def get_duck_repository(request: Request) -> DuckRepository:
    """
    FastAPI dependency returning the process-wide DuckRepository.

    The repository is created by the lifespan after connect_database()
    succeeds. A request arriving before that (or after a failed startup)
    gets a DataAccessError instead of touching an uninitialized client.

    Tests replace this dependency through `app.dependency_overrides`.
    """
    repository = getattr(request.app.state, "duck_repository", None)
    if repository is None:
        raise DataAccessError(message="Database connection is not initialized")
    return repository
