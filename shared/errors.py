"""Domain exceptions raised below the service boundary."""

from __future__ import annotations


class WalletError(Exception):
    """Base class for expected wallet backend failures."""


class InvalidArgumentError(WalletError, ValueError):
    """Raised when a caller-supplied value is malformed or out of range."""


class DatabaseUnavailableError(WalletError):
    """Raised when the MongoDB connection cannot be established."""
