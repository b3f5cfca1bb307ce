"""Normalization of raw transaction list parameters into typed filters."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from shared.errors import InvalidArgumentError
from shared.models import TransactionFilters, TransactionQuery, TransactionStatus, TransactionType


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
# Largest value a BSON int64 can carry in $skip or $limit.
MAX_PAGINATION_VALUE = 2**63 - 1


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _parse_enum(value: str | None, enum_cls: type[Enum], field_name: str) -> Enum | None:
    if value is None:
        return None
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise InvalidArgumentError(f"Invalid {field_name}. Must be one of: {', '.join(allowed)}")
    return enum_cls(value)


def parse_date_param(value: str | None, field_name: str) -> datetime | None:
    """Parse an ISO date or timestamp; date-only values mean midnight UTC."""

    if value is None:
        return None
    candidate = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise InvalidArgumentError(
            f"Invalid {field_name}. Expected an ISO 8601 date or timestamp"
        ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_positive_int(value: str | None, field_name: str, default: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(value, 10)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid {field_name}. Must be a positive integer") from exc
    if parsed < 1:
        raise InvalidArgumentError(f"Invalid {field_name}. Must be a positive integer")
    if parsed > MAX_PAGINATION_VALUE:
        raise InvalidArgumentError(f"Invalid {field_name}. Must not exceed {MAX_PAGINATION_VALUE}")
    return parsed


def normalize_transaction_filters(
    *,
    status: str | None = None,
    transaction_type: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    page: str | None = None,
    limit: str | None = None,
) -> TransactionFilters:
    """Validate raw query values and build canonical filters.

    An inverted date range is accepted on purpose and simply matches nothing.
    """

    page_number = _parse_positive_int(_blank_to_none(page), "page", DEFAULT_PAGE)
    page_size = _parse_positive_int(_blank_to_none(limit), "limit", DEFAULT_LIMIT)
    if (page_number - 1) * page_size > MAX_PAGINATION_VALUE:
        raise InvalidArgumentError("Invalid page. Offset page * limit is too large")

    return TransactionFilters(
        status=_parse_enum(_blank_to_none(status), TransactionStatus, "status"),
        type=_parse_enum(_blank_to_none(transaction_type), TransactionType, "type"),
        from_date=parse_date_param(_blank_to_none(from_date), "fromDate"),
        to_date=parse_date_param(_blank_to_none(to_date), "toDate"),
        page=page_number,
        limit=page_size,
    )


def filters_from_query(query: TransactionQuery) -> TransactionFilters:
    return normalize_transaction_filters(
        status=query.status,
        transaction_type=query.type,
        from_date=query.from_date,
        to_date=query.to_date,
        page=query.page,
        limit=query.limit,
    )
