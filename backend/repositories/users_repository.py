"""Repository adapters for user lookup."""

from __future__ import annotations

from typing import Protocol

from backend.db.mongo_client import MongoConnectionManager
from backend.repositories.transactions_repository import USERS_COLLECTION, parse_object_id
from shared.models import User


class UsersRepository(Protocol):
    async def get_by_id(self, user_id: str) -> User | None:
        """Return the user with this id, or None when it does not exist."""


class MongoUsersRepository:
    def __init__(self, connections: MongoConnectionManager) -> None:
        self._connections = connections

    async def get_by_id(self, user_id: str) -> User | None:
        object_id = parse_object_id(user_id)
        database = await self._connections.connect()
        document = await database[USERS_COLLECTION].find_one({"_id": object_id})
        if document is None:
            return None
        return User.model_validate(document)
