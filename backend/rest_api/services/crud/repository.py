"""
Repository for descriptor-driven data access.

Every query starts from ``base_query()``, which already excludes soft-deleted
rows, so deleted entities are invisible to List, Retrieve, Update and Delete.

Usage:
    repo = EntityRepository(USER, db)

    user = repo.find_by_pk(42)
    active = repo.count_where(User.status == "active")
    repo.add(User(name="Ann", email="ann@example.com"))
    repo.save(user)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from shared.infrastructure.db import safe_commit
from rest_api.services.crud.soft_delete import filter_active, soft_delete

if TYPE_CHECKING:
    from rest_api.services.crud.entity import EntityDescriptor

ModelT = TypeVar("ModelT")


class EntityRepository(Generic[ModelT]):
    """Data access for one entity type, bound to one session."""

    def __init__(self, descriptor: EntityDescriptor, session: Session):
        self._descriptor = descriptor
        self._session = session

    @property
    def model(self) -> type[ModelT]:
        """The SQLAlchemy model class."""
        return self._descriptor.model

    @property
    def session(self) -> Session:
        """The database session."""
        return self._session

    def base_query(self, *, include_deleted: bool = False) -> Select:
        """``SELECT <entity>`` restricted to live rows."""
        return filter_active(select(self.model), self.model, include_deleted)

    def find_by_pk(self, pk: Any, *, populate_existing: bool = False) -> ModelT | None:
        """
        Look up a live row by primary key.

        ``populate_existing`` overwrites the identity-map copy with the database
        state, which is how updates re-fetch the stored row.
        """
        stmt = self.base_query().where(self._descriptor.pk_column == pk)
        if populate_existing:
            stmt = stmt.execution_options(populate_existing=True)
        return self._session.scalar(stmt)

    def find_all(self, stmt: Select | None = None) -> Sequence[ModelT]:
        return self._session.scalars(stmt if stmt is not None else self.base_query()).all()

    def count_where(self, *criteria: Any, include_deleted: bool = False) -> int:
        """Number of rows matching every criterion (live rows unless ``include_deleted``)."""
        stmt = select(func.count()).select_from(self.model)
        stmt = filter_active(stmt, self.model, include_deleted).where(*criteria)
        return self._session.scalar(stmt) or 0

    def add(self, entity: ModelT) -> ModelT:
        """Insert a new row: add, commit, refresh."""
        self._session.add(entity)
        return self.save(entity)

    def save(self, entity: ModelT) -> ModelT:
        """Commit pending changes and reload generated columns."""
        safe_commit(self._session)
        self._session.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> ModelT:
        """Soft delete (or hard delete for models without ``deleted_at``)."""
        return soft_delete(self._session, entity)
