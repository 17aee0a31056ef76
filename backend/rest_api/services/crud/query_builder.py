"""
Compose parsed list intents into a SQLAlchemy select statement.

Composition order for list endpoints:
    filters -> count(total) -> order -> pagination -> execute

The total is counted on the filtered, unordered, unpaginated statement so it
reflects the whole filtered set rather than the page.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from sqlalchemy import Column, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from shared.config.constants import Limits
from shared.config.logging import get_logger
from shared.utils.exceptions import BadRequestError, UnknownFieldError
from rest_api.services.crud.params import OrderParams
from rest_api.services.crud.sanitizer import resolve_field, sanitize_order_field

if TYPE_CHECKING:
    from rest_api.services.crud.entity import EntityDescriptor

logger = get_logger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def coerce_value(column: Column, raw: str) -> Any:
    """
    Convert a query-string value to the column's Python type.

    Raises ValueError when the value cannot represent that type.
    """
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    if python_type is str:
        return raw
    if python_type is bool:
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if python_type is int:
        value = int(raw.strip())
        if not Limits.MIN_SQL_INTEGER <= value <= Limits.MAX_SQL_INTEGER:
            raise ValueError(f"integer out of range: {raw!r}")
        return value
    if python_type is float:
        return float(raw)
    if python_type is Decimal:
        try:
            return Decimal(raw)
        except InvalidOperation as exc:
            raise ValueError(f"not a decimal: {raw!r}") from exc
    if python_type is datetime:
        return datetime.fromisoformat(raw)
    if python_type is date:
        return date.fromisoformat(raw)
    if python_type is uuid.UUID:
        return uuid.UUID(raw)
    return raw


def _unknown_field(descriptor: EntityDescriptor, field: str, strict: bool, usage: str) -> None:
    if strict:
        raise UnknownFieldError(field, descriptor.name, usage=usage)
    logger.warning("Ignoring unknown field", field=field, entity=descriptor.name, usage=usage)


def apply_filters(
    stmt: Select,
    descriptor: EntityDescriptor,
    filters: Mapping[str, str],
    *,
    strict: bool = True,
) -> Select:
    """
    Add one equality predicate per filter, ANDed together.

    Values are bound parameters and column names come from the entity mapper.
    Unknown fields raise UnknownFieldError when ``strict``, otherwise they are skipped.
    """
    for key, raw_value in filters.items():
        column = resolve_field(descriptor, key)
        if column is None:
            _unknown_field(descriptor, key, strict, "filter")
            continue

        try:
            value = coerce_value(column, raw_value)
        except ValueError as exc:
            raise BadRequestError(
                f"Invalid value for filter '{key}'", field=key, reason=str(exc)
            ) from exc

        stmt = stmt.where(column == value)
    return stmt


def apply_order(
    stmt: Select,
    descriptor: EntityDescriptor,
    order: OrderParams | None,
    *,
    strict: bool = True,
) -> Select:
    """
    Add at most one ORDER BY clause.

    The field is sanitized first; an empty result means no ordering is applied.
    """
    if order is None:
        return stmt

    field = sanitize_order_field(order.field)
    if not field:
        return stmt

    column = resolve_field(descriptor, field)
    if column is None:
        _unknown_field(descriptor, field, strict, "order")
        return stmt

    return stmt.order_by(column.desc() if order.descending else column.asc())


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def apply_search(stmt: Select, columns: Sequence[Any], term: str | None) -> Select:
    """
    Fuzzy match: OR of case-insensitive ``LIKE %term%`` over ``columns``.

    Blank terms and empty column lists leave the statement untouched.
    """
    if not term or not columns:
        return stmt

    term = term.strip()[: Limits.MAX_SEARCH_TERM_LENGTH]
    if not term:
        return stmt

    pattern = f"%{escape_like(term)}%"
    return stmt.where(or_(*(column.ilike(pattern, escape="\\") for column in columns)))


def count_total(db: Session, stmt: Select) -> int:
    """Count rows matched by ``stmt`` ignoring any ordering, offset or limit."""
    count_stmt = select(func.count()).select_from(
        stmt.order_by(None).limit(None).offset(None).subquery()
    )
    return db.scalar(count_stmt) or 0
