"""FastAPI entrypoint for the wallet HTTP endpoints."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncIterator

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.db.mongo_client import MongoConnectionManager
from backend.factory import build_connection_manager, build_wallet_service
from backend.services.wallet_service import WalletService
from shared import config as _config
from shared.errors import DatabaseUnavailableError
from shared.models import (
    ServiceError,
    ServiceErrorCode,
    TransactionQuery,
    TransactionsPageResult,
)


logger = logging.getLogger(__name__)


_STATUS_BY_ERROR_CODE = {
    ServiceErrorCode.INVALID_ARGUMENT: 400,
    ServiceErrorCode.NOT_FOUND: 404,
    ServiceErrorCode.UNAVAILABLE: 500,
    ServiceErrorCode.BACKEND_ERROR: 500,
}

_LANDING_PAGE = """
<h1>Orbit Wallet API</h1>
<p>Welcome to the Orbit Wallet API. This is the backend service for the Orbit Wallet application.</p>

<h2>API Endpoints</h2>
<div style="background: #f5f5f5; padding: 1rem; border-radius: 4px; margin-bottom: 1rem;">
  <p><span style="font-weight: bold; color: #0066cc;">GET</span> /health - Health check endpoint</p>
</div>
<div style="background: #f5f5f5; padding: 1rem; border-radius: 4px; margin-bottom: 1rem;">
  <p><span style="font-weight: bold; color: #0066cc;">GET</span> /api/users/:id - Get a user by id</p>
</div>
<div style="background: #f5f5f5; padding: 1rem; border-radius: 4px; margin-bottom: 1rem;">
  <p><span style="font-weight: bold; color: #0066cc;">GET</span> /api/transactions/user/:userId - Get a user's transactions</p>
</div>
<div style="background: #f5f5f5; padding: 1rem; border-radius: 4px; margin-bottom: 1rem;">
  <p><span style="font-weight: bold; color: #0066cc;">GET</span> /api/transactions - Get all transactions with user details</p>
</div>
"""


@lru_cache(maxsize=1)
def get_connection_manager() -> MongoConnectionManager:
    """Create and cache the MongoDB connection manager once per process."""

    return build_connection_manager()


@lru_cache(maxsize=1)
def get_wallet_service() -> WalletService:
    """Create and cache the wallet service once per process."""

    return build_wallet_service(get_connection_manager())


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    connections = get_connection_manager()
    try:
        await connections.connect()
    except DatabaseUnavailableError:
        if not _config.is_production():
            logger.critical("startup_database_connection_failed app_env=%s exiting", _config.app_env())
            raise SystemExit(1)
        logger.error("startup_database_connection_failed app_env=%s retrying_on_next_request", _config.app_env())

    yield

    await connections.close()


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _service_error_response(error: ServiceError) -> JSONResponse:
    return _error_response(_STATUS_BY_ERROR_CODE.get(error.code, 500), error.message)


def _page_response(result: TransactionsPageResult) -> dict[str, Any]:
    return {
        "success": True,
        "data": [item.model_dump(mode="json", by_alias=True) for item in result.items],
        "pagination": result.pagination.model_dump(mode="json", by_alias=True),
    }


app = FastAPI(title="Orbit Wallet API", lifespan=lifespan)

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log every request with its status code and duration."""

    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s duration_ms=%d",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error_response(404, "Route not found")
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return _error_response(500, str(exc) or "An unknown error occurred")


@app.get("/", response_class=HTMLResponse)
async def landing_page() -> str:
    return _LANDING_PAGE


@app.get("/health")
async def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok", "message": "Server is running"}


@app.get("/api/users/{user_id}")
async def get_user_by_id(user_id: str) -> Any:
    result = await get_wallet_service().get_user_by_id(user_id)
    if isinstance(result, ServiceError):
        return _service_error_response(result)
    return {"success": True, "data": result.model_dump(mode="json", by_alias=True)}


@app.get("/api/transactions/user/{user_id}")
async def get_transactions_by_user_id(
    user_id: str,
    status: str | None = None,
    transaction_type: str | None = Query(default=None, alias="type"),
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    page: str | None = None,
    limit: str | None = None,
) -> Any:
    query = TransactionQuery(
        status=status,
        type=transaction_type,
        from_date=from_date,
        to_date=to_date,
        page=page,
        limit=limit,
    )
    result = await get_wallet_service().get_transactions_by_user_id(user_id, query)
    if isinstance(result, ServiceError):
        return _service_error_response(result)
    return _page_response(result)


@app.get("/api/transactions")
async def get_all_transactions_with_user_details(
    status: str | None = None,
    transaction_type: str | None = Query(default=None, alias="type"),
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    page: str | None = None,
    limit: str | None = None,
) -> Any:
    query = TransactionQuery(
        status=status,
        type=transaction_type,
        from_date=from_date,
        to_date=to_date,
        page=page,
        limit=limit,
    )
    result = await get_wallet_service().get_all_transactions_with_user_details(query)
    if isinstance(result, ServiceError):
        return _service_error_response(result)
    return _page_response(result)
