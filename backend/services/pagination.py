"""Pagination metadata derived from a total count and the requested page."""

from __future__ import annotations

from shared.models import Pagination, TransactionFilters


def compute_total_pages(*, total_count: int, limit: int) -> int:
    """Return ceil(total_count / limit), 0 when nothing matched."""

    if total_count <= 0:
        return 0
    return ((total_count - 1) // limit) + 1


def build_pagination(*, total_count: int, filters: TransactionFilters) -> Pagination:
    # currentPage echoes the request even past the last page.
    return Pagination(
        total_count=total_count,
        total_pages=compute_total_pages(total_count=total_count, limit=filters.limit),
        current_page=filters.page,
        limit=filters.limit,
    )
