"""
Standardized pagination for list endpoints.

Two ways to ask for a window are accepted:
1. ``page`` + ``page_size``
2. ``limit`` + ``offset`` (authoritative when either is supplied)

Malformed values never fail the request: non-numeric or out-of-range input
falls back to the defaults, sizes above the maximum are clamped.

Usage:
    from rest_api.routers._common.pagination import extract_pagination, apply_pagination

    pagination = extract_pagination(request.query_params)
    stmt = apply_pagination(stmt, pagination)
    return success_with_pagination(items, pagination.to_info(total))
"""

import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy.sql import Select

from shared.config.constants import Limits, QueryParams
from shared.utils.schemas import PaginationInfo
from rest_api.routers._common.query import first_value, query_multidict

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass
class Pagination:
    """
    Pagination window with validation.

    Attributes:
        page: 1-indexed page number
        page_size: Items per page (1 to max_page_size)
        offset: Number of items to skip
        limit: Maximum items to return (always equal to page_size)
        max_page_size: Upper bound for page_size/limit
    """

    page: int = Limits.DEFAULT_PAGE
    page_size: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = Limits.DEFAULT_OFFSET
    limit: int = Limits.DEFAULT_PAGE_SIZE
    max_page_size: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        """Clamp values into their valid ranges."""
        self.page_size = min(max(Limits.MIN_PAGE_SIZE, self.page_size), self.max_page_size)
        self.limit = min(max(Limits.MIN_PAGE_SIZE, self.limit), self.max_page_size)
        self.page = max(Limits.DEFAULT_PAGE, self.page)
        self.offset = max(0, self.offset)

    def to_info(self, total: int) -> PaginationInfo:
        """Pagination block for the response envelope."""
        return PaginationInfo(page=self.page, page_size=self.page_size, total=total)


def parse_int(raw: str | None) -> int | None:
    """
    Parse a base-10 integer query value.

    None when absent, malformed or outside the storage integer range.
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not _INTEGER.fullmatch(raw):
        return None
    value = int(raw)
    if not Limits.MIN_SQL_INTEGER <= value <= Limits.MAX_SQL_INTEGER:
        return None
    return value


def extract_pagination(
    query: Any,
    *,
    default_page_size: int = Limits.DEFAULT_PAGE_SIZE,
    max_page_size: int = Limits.MAX_PAGE_SIZE,
) -> Pagination:
    """
    Build the pagination window from query parameters.

    Never raises: invalid values keep the defaults (page 1, default_page_size).
    """
    params = query_multidict(query)

    page = Limits.DEFAULT_PAGE
    page_size = min(default_page_size, max_page_size)

    raw_page_size = parse_int(first_value(params, QueryParams.PAGE_SIZE))
    if raw_page_size is not None and raw_page_size >= 1:
        page_size = min(raw_page_size, max_page_size)

    # A page whose offset would not fit a storage integer is malformed
    raw_page = parse_int(first_value(params, QueryParams.PAGE))
    if raw_page is not None and 1 <= raw_page <= Limits.MAX_SQL_INTEGER // page_size:
        page = raw_page

    limit: int | None = None
    raw_limit = parse_int(first_value(params, QueryParams.LIMIT))
    if raw_limit is not None and raw_limit >= 1:
        limit = min(raw_limit, max_page_size)

    offset: int | None = None
    raw_offset = parse_int(first_value(params, QueryParams.OFFSET))
    if raw_offset is not None and raw_offset >= 0:
        offset = raw_offset

    if limit is not None or offset is not None:
        # limit/offset win; page/page_size are derived from them
        if limit is not None:
            page_size = limit
        offset = offset or 0
        return Pagination(
            page=offset // page_size + 1,
            page_size=page_size,
            offset=offset,
            limit=page_size,
            max_page_size=max_page_size,
        )

    return Pagination(
        page=page,
        page_size=page_size,
        offset=(page - 1) * page_size,
        limit=page_size,
        max_page_size=max_page_size,
    )


def apply_pagination(stmt: Select, pagination: Pagination) -> Select:
    """Add OFFSET/LIMIT to a select statement."""
    return stmt.offset(pagination.offset).limit(pagination.limit)
