"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging
from urllib.parse import urlparse

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_PRODUCTION_VALUES = {"production", "prod"}
_DEFAULT_DB_NAME = "orbit_wallet"
_DEFAULT_TIMEOUTS_MS = {
    "serverSelectionTimeoutMS": 15000,
    "connectTimeoutMS": 30000,
    "socketTimeoutMS": 60000,
}


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def _get_int_env(name: str, default: int) -> int:
    raw_value = (get_env(name, "") or "").strip()
    if not raw_value:
        return default
    try:
        return int(raw_value)
    except ValueError:
        logger.warning("invalid_int_env name=%s value=%s default=%s", name, raw_value, default)
        return default


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def is_production() -> bool:
    """Return whether the process runs in production mode."""
    return app_env().lower() in _PRODUCTION_VALUES


def mongodb_uri() -> str | None:
    """Return MongoDB connection string when configured."""
    value = (get_env("MONGODB_URI", "") or "").strip()
    return value or None


def mongodb_db_name() -> str:
    """Return the database name, falling back to the one embedded in the URI."""
    explicit = (get_env("MONGODB_DB_NAME", "") or "").strip()
    if explicit:
        return explicit

    uri = mongodb_uri()
    if uri:
        path = urlparse(uri).path.lstrip("/")
        if path:
            return path

    return _DEFAULT_DB_NAME


def mongodb_timeouts_ms() -> dict[str, int]:
    """Return driver timeout options in milliseconds."""
    return {
        "serverSelectionTimeoutMS": _get_int_env(
            "MONGODB_SERVER_SELECTION_TIMEOUT_MS", _DEFAULT_TIMEOUTS_MS["serverSelectionTimeoutMS"]
        ),
        "connectTimeoutMS": _get_int_env(
            "MONGODB_CONNECT_TIMEOUT_MS", _DEFAULT_TIMEOUTS_MS["connectTimeoutMS"]
        ),
        "socketTimeoutMS": _get_int_env(
            "MONGODB_SOCKET_TIMEOUT_MS", _DEFAULT_TIMEOUTS_MS["socketTimeoutMS"]
        ),
    }


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins, open to every origin when unset."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    return parsed_origins or ["*"]


def server_host() -> str:
    """Return the interface the development server binds to."""
    return (get_env("HOST", "0.0.0.0") or "0.0.0.0").strip() or "0.0.0.0"


def server_port() -> int:
    """Return the HTTP port used by the development server."""
    return _get_int_env("PORT", 3000)


def log_level() -> str:
    """Return the root log level name."""
    return (get_env("LOG_LEVEL", "INFO") or "INFO").strip().upper() or "INFO"
