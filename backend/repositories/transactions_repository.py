"""Transactions repository adapters.

Listing queries run as a single aggregation whose `$facet` stage computes the
requested page and the total match count from the same matched set, so the
two can never disagree with each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from bson import ObjectId

from backend.db.mongo_client import MongoConnectionManager
from shared.errors import InvalidArgumentError
from shared.models import Transaction, TransactionFilters, TransactionWithUser


TRANSACTIONS_COLLECTION = "transactions"
USERS_COLLECTION = "users"
INVALID_USER_ID_MESSAGE = "Invalid user ID format"


@dataclass(slots=True)
class TransactionPage:
    items: list[Transaction] = field(default_factory=list)
    total_count: int = 0


class TransactionsRepository(Protocol):
    async def find_by_user(self, user_id: str, filters: TransactionFilters) -> TransactionPage:
        """Return one page of a user's transactions plus the full match count."""

    async def find_with_user_details(self, filters: TransactionFilters) -> TransactionPage:
        """Return one page of transactions joined with their user."""


def parse_object_id(value: str) -> ObjectId:
    """Check id format only; existence is never verified here."""

    if not ObjectId.is_valid(value):
        raise InvalidArgumentError(INVALID_USER_ID_MESSAGE)
    return ObjectId(value)


def build_match_stage(filters: TransactionFilters, user_id: ObjectId | None = None) -> dict[str, Any]:
    match: dict[str, Any] = {}

    if user_id is not None:
        match["userId"] = user_id

    if filters.status is not None:
        match["status"] = filters.status.value

    if filters.type is not None:
        match["type"] = filters.type.value

    date_bounds: dict[str, Any] = {}
    if filters.from_date is not None:
        date_bounds["$gte"] = filters.from_date
    if filters.to_date is not None:
        date_bounds["$lte"] = filters.to_date
    if date_bounds:
        match["transactionDate"] = date_bounds

    return {"$match": match}


def build_page_facet(filters: TransactionFilters) -> dict[str, Any]:
    return {
        "$facet": {
            "transactions": [
                {"$sort": {"transactionDate": -1, "_id": -1}},
                {"$skip": filters.skip},
                {"$limit": filters.limit},
            ],
            "totalCount": [{"$count": "count"}],
        }
    }


def build_user_transactions_pipeline(user_id: ObjectId, filters: TransactionFilters) -> list[dict[str, Any]]:
    return [build_match_stage(filters, user_id=user_id), build_page_facet(filters)]


def build_transactions_with_user_pipeline(filters: TransactionFilters) -> list[dict[str, Any]]:
    # `$unwind` without preserveNullAndEmptyArrays drops transactions whose
    # user no longer exists.
    return [
        build_match_stage(filters),
        {
            "$lookup": {
                "from": USERS_COLLECTION,
                "localField": "userId",
                "foreignField": "_id",
                "as": "user",
            }
        },
        {"$unwind": "$user"},
        build_page_facet(filters),
    ]


def parse_facet_result(
    documents: list[dict[str, Any]],
    model: type[Transaction] = Transaction,
) -> TransactionPage:
    if not documents:
        return TransactionPage()

    facets = documents[0]
    items = [model.model_validate(row) for row in facets.get("transactions") or []]
    counts = facets.get("totalCount") or []
    total_count = int(counts[0].get("count", 0)) if counts else 0
    return TransactionPage(items=items, total_count=total_count)


class MongoTransactionsRepository:
    """MongoDB repository over the `transactions` collection."""

    def __init__(self, connections: MongoConnectionManager) -> None:
        self._connections = connections

    async def _aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        database = await self._connections.connect()
        cursor = await database[TRANSACTIONS_COLLECTION].aggregate(pipeline)
        return await cursor.to_list()

    async def find_by_user(self, user_id: str, filters: TransactionFilters) -> TransactionPage:
        object_id = parse_object_id(user_id)
        documents = await self._aggregate(build_user_transactions_pipeline(object_id, filters))
        return parse_facet_result(documents)

    async def find_with_user_details(self, filters: TransactionFilters) -> TransactionPage:
        documents = await self._aggregate(build_transactions_with_user_pipeline(filters))
        return parse_facet_result(documents, model=TransactionWithUser)
