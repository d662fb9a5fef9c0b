# =============================================================================
# core/connection.py  -  Connection Registry (one client, many databases)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Owns the single MongoDB client for the life of the process and a cache
#   of database handles keyed by name.
#
#     registry = ConnectionRegistry(settings)
#     db = await registry.database("shop")     # connects on first call
#     db = await registry.database("shop")     # same handle, no I/O
#
# LIFECYCLE:
#   - Nothing happens at construction time.  The URI is read and the client
#     is connected on the FIRST request for a handle.
#   - A missing URI raises ConfigurationError before any driver call.
#   - There is no reconnect logic and no close().  A dropped connection
#     shows up as an error on the next operation; process exit tears down.
#
# CONCURRENCY:
#   Tool calls run as asyncio tasks, and the client connect awaits I/O, so
#   two early calls could both see "no client yet".  The lock makes client
#   creation single-flight and serializes creation of new database handles.
#   Cached handles are read without the lock.
# =============================================================================

import asyncio
import logging
from typing import Any, Callable, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from core.config import Settings

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]


class ConnectionRegistry:
    """Process-wide holder of the MongoDB client and per-database handles."""

    def __init__(self, settings: Settings, client_factory: ClientFactory = AsyncMongoClient):
        self._settings = settings
        self._client_factory = client_factory
        self._client: Optional[AsyncMongoClient] = None
        self._databases: dict[str, AsyncDatabase] = {}
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def client(self) -> AsyncMongoClient:
        """Return the shared client, connecting it on first use."""
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                uri = self._settings.require_mongodb_uri()
                logger.info("Connecting to MongoDB at %s", self._settings.redacted_uri())
                client = self._client_factory(uri)
                try:
                    await client.aconnect()
                except Exception:
                    # A client that never connected still owns monitor tasks.
                    await client.close()
                    raise
                self._client = client
        return self._client

    async def database(self, name: str) -> AsyncDatabase:
        """Return the cached handle for database ``name``, creating it once."""
        db = self._databases.get(name)
        if db is not None:
            return db

        client = await self.client()
        async with self._lock:
            if name not in self._databases:
                self._databases[name] = client.get_database(name)
            return self._databases[name]
