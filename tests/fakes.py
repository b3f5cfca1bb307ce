"""Deterministic MongoDB fakes for repository, service and API tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError


def _matches(document: dict[str, Any], predicate: dict[str, Any]) -> bool:
    for key, condition in predicate.items():
        value = document.get(key)
        if isinstance(condition, dict):
            for operator, bound in condition.items():
                if value is None:
                    return False
                if operator == "$gte":
                    if not value >= bound:
                        return False
                elif operator == "$lte":
                    if not value <= bound:
                        return False
                else:
                    raise NotImplementedError(f"Unsupported operator in fake: {operator}")
        elif value != condition:
            return False
    return True


@dataclass
class FakeCursor:
    documents: list[dict[str, Any]]

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        if length is None:
            return list(self.documents)
        return list(self.documents[:length])


@dataclass
class FakeCollection:
    database: "FakeDatabase"
    name: str
    documents: list[dict[str, Any]] = field(default_factory=list)
    pipelines: list[list[dict[str, Any]]] = field(default_factory=list)

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> FakeCursor:
        self.pipelines.append(pipeline)
        return FakeCursor(self.database.run_pipeline(list(self.documents), pipeline))

    async def find_one(self, predicate: dict[str, Any]) -> dict[str, Any] | None:
        for document in self.documents:
            if _matches(document, predicate):
                return dict(document)
        return None

    async def insert_many(self, documents: list[dict[str, Any]]) -> None:
        for document in documents:
            self.documents.append({"_id": ObjectId(), **document})

    async def delete_many(self, predicate: dict[str, Any]) -> None:
        self.documents = [document for document in self.documents if not _matches(document, predicate)]


class FakeDatabase:
    """In-memory database understanding the aggregation stages the app emits."""

    def __init__(self) -> None:
        self._collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(database=self, name=name)
        return self._collections[name]

    def run_pipeline(self, documents: list[dict[str, Any]], pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for stage in pipeline:
            ((operator, argument),) = stage.items()
            documents = getattr(self, f"_stage_{operator[1:]}")(documents, argument)
        return documents

    def _stage_match(self, documents, predicate):
        return [document for document in documents if _matches(document, predicate)]

    def _stage_lookup(self, documents, options):
        foreign = self[options["from"]].documents
        joined = []
        for document in documents:
            local_value = document.get(options["localField"])
            related = [dict(row) for row in foreign if row.get(options["foreignField"]) == local_value]
            joined.append({**document, options["as"]: related})
        return joined

    def _stage_unwind(self, documents, path):
        field_name = path.lstrip("$")
        unwound = []
        for document in documents:
            for element in document.get(field_name) or []:
                unwound.append({**document, field_name: element})
        return unwound

    def _stage_facet(self, documents, facets):
        return [{name: self.run_pipeline(list(documents), stages) for name, stages in facets.items()}]

    def _stage_sort(self, documents, options):
        ordered = list(documents)
        for key, direction in reversed(list(options.items())):
            ordered.sort(key=lambda document: document[key], reverse=direction == -1)
        return ordered

    def _stage_skip(self, documents, count):
        return documents[count:]

    def _stage_limit(self, documents, count):
        return documents[:count]

    def _stage_count(self, documents, name):
        if not documents:
            return []
        return [{name: len(documents)}]


class FakeConnectionManager:
    """Stands in for MongoConnectionManager and hands out one fake database."""

    def __init__(self, database: FakeDatabase | None = None) -> None:
        self.database = database or FakeDatabase()
        self.connect_calls = 0
        self.closed = False

    async def connect(self) -> FakeDatabase:
        self.connect_calls += 1
        return self.database

    async def close(self) -> None:
        self.closed = True


class _FakeAdmin:
    def __init__(self, client: "FakeMongoClient") -> None:
        self._client = client

    async def command(self, name: str) -> dict[str, Any]:
        self._client.commands.append(name)
        await asyncio.sleep(self._client.ping_delay)
        if self._client.fail_ping:
            raise ServerSelectionTimeoutError("No servers found yet")
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, *, fail_ping: bool = False, ping_delay: float = 0.01) -> None:
        self.fail_ping = fail_ping
        self.ping_delay = ping_delay
        self.commands: list[str] = []
        self.closed = False
        self.databases: dict[str, FakeDatabase] = {}
        self.admin = _FakeAdmin(self)

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.databases.setdefault(name, FakeDatabase())

    async def close(self) -> None:
        self.closed = True


BASE_DATE = datetime(2025, 1, 31, 12, 0, tzinfo=timezone.utc)


def make_user(name: str = "User 1", phone_number: str = "+15550000001") -> dict[str, Any]:
    return {
        "_id": ObjectId(),
        "name": name,
        "phoneNumber": phone_number,
        "createdAt": BASE_DATE,
        "updatedAt": BASE_DATE,
    }


def make_transaction(
    user_id: ObjectId,
    *,
    days_ago: int,
    status: str = "success",
    transaction_type: str = "debit",
    amount: float = 10.0,
) -> dict[str, Any]:
    return {
        "_id": ObjectId(),
        "status": status,
        "type": transaction_type,
        "transactionDate": BASE_DATE - timedelta(days=days_ago),
        "amount": amount,
        "userId": user_id,
        "createdAt": BASE_DATE,
        "updatedAt": BASE_DATE,
    }


def seeded_database() -> tuple[FakeDatabase, dict[str, Any], dict[str, Any], ObjectId]:
    """Two users, a spread of transactions, and one transaction with a dangling user id.

    Returns the database, both user documents and the dangling user id.
    """

    database = FakeDatabase()
    alice = make_user("Alice", "+15550000001")
    bob = make_user("Bob", "+15550000002")
    ghost_id = ObjectId()
    database["users"].documents.extend([alice, bob])

    statuses = ["success", "pending", "failed"]
    types = ["debit", "credit"]
    transactions = [
        make_transaction(
            alice["_id"],
            days_ago=day,
            status=statuses[day % 3],
            transaction_type=types[day % 2],
            amount=float(day * 10),
        )
        for day in range(5)
    ]
    transactions.extend(
        make_transaction(bob["_id"], days_ago=day, status=statuses[day % 3], transaction_type=types[day % 2])
        for day in range(5, 12)
    )
    transactions.append(make_transaction(ghost_id, days_ago=12, status="success", transaction_type="credit"))
    database["transactions"].documents.extend(transactions)
    return database, alice, bob, ghost_id
