"""Reset the wallet collections and fill them with random demo data.

Usage: python -m backend.scripts.seed_data [--users N] [--transactions-per-user N]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

from bson import ObjectId
from pymongo.errors import PyMongoError

from backend.db.mongo_client import MongoConnectionManager
from backend.factory import build_connection_manager
from backend.main import configure_logging
from backend.repositories.transactions_repository import TRANSACTIONS_COLLECTION, USERS_COLLECTION
from shared.errors import DatabaseUnavailableError
from shared.models import TransactionStatus, TransactionType


logger = logging.getLogger(__name__)

SEED_WINDOW = timedelta(days=30)


def generate_users(count: int, rng: random.Random, *, now: datetime) -> list[dict[str, Any]]:
    return [
        {
            "_id": ObjectId(),
            "name": f"User {index}",
            "phoneNumber": f"+1{rng.randint(1_000_000_000, 9_999_999_999)}",
            "createdAt": now,
            "updatedAt": now,
        }
        for index in range(1, count + 1)
    ]


def generate_transactions_for_user(
    user_id: ObjectId,
    rng: random.Random,
    *,
    now: datetime,
    count: int = 5,
) -> list[dict[str, Any]]:
    """Random transactions dated within the last 30 days."""

    statuses = list(TransactionStatus)
    types = list(TransactionType)
    window_start = now - SEED_WINDOW

    transactions = []
    for _ in range(count):
        transactions.append(
            {
                "status": rng.choice(statuses).value,
                "type": rng.choice(types).value,
                "transactionDate": window_start + rng.random() * SEED_WINDOW,
                "amount": round(rng.random() * 1000, 2),
                "userId": user_id,
                "createdAt": now,
                "updatedAt": now,
            }
        )
    return transactions


async def seed_database(
    connections: MongoConnectionManager,
    *,
    user_count: int,
    transactions_per_user: int,
    rng: random.Random,
) -> tuple[int, int]:
    database = await connections.connect()
    now = datetime.now(timezone.utc)

    await database[USERS_COLLECTION].delete_many({})
    await database[TRANSACTIONS_COLLECTION].delete_many({})
    logger.info("seed_previous_data_cleared")

    users = generate_users(user_count, rng, now=now)
    if users:
        await database[USERS_COLLECTION].insert_many(users)
    logger.info("seed_users_created count=%s", len(users))

    transactions: list[dict[str, Any]] = []
    for user in users:
        transactions.extend(
            generate_transactions_for_user(user["_id"], rng, now=now, count=transactions_per_user)
        )
    if transactions:
        await database[TRANSACTIONS_COLLECTION].insert_many(transactions)
    logger.info("seed_transactions_created count=%s", len(transactions))

    return len(users), len(transactions)


async def _run(args: argparse.Namespace) -> None:
    connections = build_connection_manager()
    try:
        await seed_database(
            connections,
            user_count=args.users,
            transactions_per_user=args.transactions_per_user,
            rng=random.Random(args.random_seed),
        )
    finally:
        await connections.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed the wallet database with demo users and transactions.")
    parser.add_argument("--users", type=int, default=10, help="Number of users to create.")
    parser.add_argument(
        "--transactions-per-user",
        type=int,
        default=5,
        help="Number of transactions generated for each user.",
    )
    parser.add_argument("--random-seed", type=int, default=None, help="Seed for reproducible data.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(_run(args))
    except (DatabaseUnavailableError, PyMongoError):
        logger.exception("seed_failed")
        return 1
    logger.info("seed_completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
