"""Wallet read service.

Runs filter normalization, the repository query and pagination, and turns
expected failures into `ServiceError` values at this boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pymongo.errors import PyMongoError

from backend.repositories.transactions_repository import TransactionPage, TransactionsRepository
from backend.repositories.users_repository import UsersRepository
from backend.services.filters import filters_from_query
from backend.services.pagination import build_pagination
from shared.errors import DatabaseUnavailableError, InvalidArgumentError
from shared.models import (
    ServiceError,
    ServiceErrorCode,
    TransactionFilters,
    TransactionQuery,
    TransactionsPageResult,
    User,
)


logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"


def _error_from_exception(exc: Exception, *, operation: str) -> ServiceError:
    if isinstance(exc, InvalidArgumentError):
        logger.info("wallet_invalid_argument operation=%s message=%s", operation, exc)
        return ServiceError(code=ServiceErrorCode.INVALID_ARGUMENT, message=str(exc))
    if isinstance(exc, DatabaseUnavailableError):
        logger.warning("wallet_database_unavailable operation=%s message=%s", operation, exc)
        return ServiceError(code=ServiceErrorCode.UNAVAILABLE, message=str(exc))
    logger.exception("wallet_backend_error operation=%s", operation, exc_info=exc)
    return ServiceError(code=ServiceErrorCode.BACKEND_ERROR, message=str(exc))


def _page_result(page: TransactionPage, filters: TransactionFilters) -> TransactionsPageResult:
    return TransactionsPageResult(
        items=page.items,
        pagination=build_pagination(total_count=page.total_count, filters=filters),
    )


@dataclass(slots=True)
class WalletService:
    users_repository: UsersRepository
    transactions_repository: TransactionsRepository

    async def get_user_by_id(self, user_id: str) -> User | ServiceError:
        try:
            user = await self.users_repository.get_by_id(user_id)
        except (InvalidArgumentError, DatabaseUnavailableError, PyMongoError) as exc:
            return _error_from_exception(exc, operation="get_user_by_id")

        if user is None:
            return ServiceError(code=ServiceErrorCode.NOT_FOUND, message=USER_NOT_FOUND_MESSAGE)
        return user

    async def get_transactions_by_user_id(
        self,
        user_id: str,
        query: TransactionQuery,
    ) -> TransactionsPageResult | ServiceError:
        try:
            filters = filters_from_query(query)
            page = await self.transactions_repository.find_by_user(user_id, filters)
        except (InvalidArgumentError, DatabaseUnavailableError, PyMongoError) as exc:
            return _error_from_exception(exc, operation="get_transactions_by_user_id")

        logger.info(
            "wallet_user_transactions_listed user_id=%s page=%s limit=%s total_count=%s",
            user_id,
            filters.page,
            filters.limit,
            page.total_count,
        )
        return _page_result(page, filters)

    async def get_all_transactions_with_user_details(
        self,
        query: TransactionQuery,
    ) -> TransactionsPageResult | ServiceError:
        try:
            filters = filters_from_query(query)
            page = await self.transactions_repository.find_with_user_details(filters)
        except (InvalidArgumentError, DatabaseUnavailableError, PyMongoError) as exc:
            return _error_from_exception(exc, operation="get_all_transactions_with_user_details")

        logger.info(
            "wallet_transactions_listed page=%s limit=%s total_count=%s",
            filters.page,
            filters.limit,
            page.total_count,
        )
        return _page_result(page, filters)
