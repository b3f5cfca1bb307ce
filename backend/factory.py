"""Composition root for backend services."""

from __future__ import annotations

from backend.db.mongo_client import MongoConnectionManager, MongoSettings
from backend.repositories.transactions_repository import MongoTransactionsRepository
from backend.repositories.users_repository import MongoUsersRepository
from backend.services.wallet_service import WalletService
from shared import config


def build_mongo_settings() -> MongoSettings:
    return MongoSettings(
        uri=config.mongodb_uri(),
        db_name=config.mongodb_db_name(),
        timeouts_ms=config.mongodb_timeouts_ms(),
    )


def build_connection_manager() -> MongoConnectionManager:
    return MongoConnectionManager(build_mongo_settings())


def build_wallet_service(connections: MongoConnectionManager) -> WalletService:
    """Build the wallet service with MongoDB repository adapters sharing one connection."""

    return WalletService(
        users_repository=MongoUsersRepository(connections),
        transactions_repository=MongoTransactionsRepository(connections),
    )
