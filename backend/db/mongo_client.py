"""MongoDB connection manager shared by backend repositories only."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from shared.errors import DatabaseUnavailableError


logger = logging.getLogger(__name__)

MISSING_URI_MESSAGE = "MongoDB connection string is not defined in environment variables"


@dataclass(slots=True)
class MongoSettings:
    uri: str | None
    db_name: str
    timeouts_ms: dict[str, int] = field(default_factory=dict)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


MongoClientFactory = Callable[[MongoSettings], Any]


def create_async_client(settings: MongoSettings) -> AsyncMongoClient:
    """Build the driver client; no I/O happens until the first command."""

    return AsyncMongoClient(settings.uri, tz_aware=True, **settings.timeouts_ms)


class MongoConnectionManager:
    """Lazily connects to MongoDB and shares one in-flight attempt.

    `connect()` returns the database handle. Callers arriving while an attempt
    is running await that same attempt instead of opening their own client.
    A failed attempt resets the state to DISCONNECTED so the next caller
    starts over.
    """

    def __init__(
        self,
        settings: MongoSettings,
        client_factory: MongoClientFactory = create_async_client,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory
        self._state = ConnectionState.DISCONNECTED
        self._client: Any | None = None
        self._database: Any | None = None
        self._pending: asyncio.Task | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    async def connect(self) -> Any:
        if self._state is ConnectionState.CONNECTED and self._database is not None:
            logger.debug("mongo_connection_reused db_name=%s", self._settings.db_name)
            return self._database

        # No await between the check and the assignment, so concurrent
        # callers on the same loop cannot both start an attempt.
        if self._pending is None:
            self._pending = asyncio.create_task(self._open())
        else:
            logger.info("mongo_connection_awaiting_pending_attempt db_name=%s", self._settings.db_name)

        return await asyncio.shield(self._pending)

    async def _open(self) -> Any:
        self._state = ConnectionState.CONNECTING
        logger.info("mongo_connecting db_name=%s", self._settings.db_name)
        connected = False
        try:
            client = await self._create_verified_client()
            self._client = client
            self._database = client[self._settings.db_name]
            connected = True
        except DatabaseUnavailableError as exc:
            logger.error("mongo_connection_failed db_name=%s error=%s", self._settings.db_name, exc)
            raise
        finally:
            self._pending = None
            self._state = ConnectionState.CONNECTED if connected else ConnectionState.DISCONNECTED

        logger.info("mongo_connected db_name=%s", self._settings.db_name)
        return self._database

    async def _create_verified_client(self) -> Any:
        if not self._settings.uri:
            raise DatabaseUnavailableError(MISSING_URI_MESSAGE)

        try:
            client = self._client_factory(self._settings)
        except PyMongoError as exc:
            raise DatabaseUnavailableError(str(exc)) from exc

        try:
            await client.admin.command("ping")
        except PyMongoError as exc:
            await client.close()
            raise DatabaseUnavailableError(str(exc)) from exc
        return client

    async def close(self) -> None:
        client = self._client
        self._client = None
        self._database = None
        self._state = ConnectionState.DISCONNECTED
        if client is not None:
            await client.close()
            logger.info("mongo_connection_closed db_name=%s", self._settings.db_name)
