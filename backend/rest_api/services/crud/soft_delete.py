"""
Soft delete helpers.

Models that inherit ``SoftDeleteMixin`` are never removed from the table:
``deleted_at`` is set instead and every repository query skips the row.
Models without the mixin fall back to a hard delete.
"""

from typing import TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from rest_api.models import SoftDeleteMixin
from shared.infrastructure.db import safe_commit

T = TypeVar("T")


def supports_soft_delete(model_class: type) -> bool:
    """True when the model carries a ``deleted_at`` column."""
    return isinstance(model_class, type) and issubclass(model_class, SoftDeleteMixin)


def filter_active(stmt: Select, model_class: type, include_deleted: bool = False) -> Select:
    """
    Exclude soft-deleted rows from a select statement.

    No-op for models without ``SoftDeleteMixin`` or when ``include_deleted`` is set.
    """
    if include_deleted or not supports_soft_delete(model_class):
        return stmt
    return stmt.where(model_class.deleted_at.is_(None))


def soft_delete(db: Session, entity: T) -> T:
    """
    Mark an entity as deleted and commit.

    Rolls back and re-raises on failure (see ``safe_commit``).
    """
    if isinstance(entity, SoftDeleteMixin):
        entity.soft_delete()
    else:
        db.delete(entity)
    safe_commit(db)
    return entity
