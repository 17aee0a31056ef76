"""
Filter and ordering intents parsed from list query parameters.

Supported:
1. Equality filters: ``?name=abc&status=active`` (every non-reserved key)
2. Ordering: ``?order_by=created_at desc`` or DRF-style ``?ordering=-created_at``

Parsing is pure and never fails; validation of field names happens later,
when the intents are applied to a statement (see query_builder).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from shared.config.constants import OrderDirection, QueryParams
from rest_api.routers._common.query import first_value, query_multidict


@dataclass(frozen=True)
class OrderParams:
    """Single-field sort directive."""

    field: str
    direction: OrderDirection = OrderDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is OrderDirection.DESC


@dataclass
class FilterParams:
    """Equality filters plus optional ordering for a list request."""

    filters: dict[str, str] = field(default_factory=dict)
    order: OrderParams | None = None


def parse_direction(raw: str | None) -> OrderDirection:
    """Map a direction token to ASC/DESC; anything unrecognised collapses to ASC."""
    if raw and raw.upper() == OrderDirection.DESC.value:
        return OrderDirection.DESC
    return OrderDirection.ASC


def extract_order(query: Any) -> OrderParams | None:
    """
    Read the order intent. ``order_by`` takes precedence over ``ordering``.

    ``order_by=age desc`` and ``ordering=-age`` both yield ``OrderParams("age", DESC)``.
    """
    order_by = first_value(query, QueryParams.ORDER_BY)
    if order_by:
        parts = order_by.split()
        if not parts:
            return None
        direction = parse_direction(parts[1]) if len(parts) > 1 else OrderDirection.ASC
        return OrderParams(field=parts[0], direction=direction)

    ordering = first_value(query, QueryParams.ORDERING)
    if ordering:
        if ordering.startswith("-"):
            return OrderParams(field=ordering[1:], direction=OrderDirection.DESC)
        return OrderParams(field=ordering, direction=OrderDirection.ASC)

    return None


def extract_filters(query: Any, exclude_keys: Iterable[str] = ()) -> FilterParams:
    """
    Build equality filters from every query key except the reserved pagination/ordering
    keys and ``exclude_keys``. When a key repeats, its first value is used.
    """
    params = query_multidict(query)
    excluded = QueryParams.RESERVED | frozenset(exclude_keys)

    filters = {
        key: values[0]
        for key, values in params.items()
        if key not in excluded and values
    }
    return FilterParams(filters=filters, order=extract_order(params))
