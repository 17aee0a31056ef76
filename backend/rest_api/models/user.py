"""
User Model.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import Limits, UserStatus

from .base import Base, SoftDeleteMixin, TimestampMixin


class User(TimestampMixin, SoftDeleteMixin, Base):
    """
    An account exposed through the /users resource.
    Inherits: created_at, updated_at (TimestampMixin), deleted_at (SoftDeleteMixin).
    """

    __tablename__ = "users"

    # SQLite only auto-increments INTEGER PRIMARY KEY columns
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True
    )
    name: Mapped[str] = mapped_column(String(Limits.MAX_NAME_LENGTH), nullable=False)
    # Unique at the storage layer; the users endpoint also pre-checks it
    email: Mapped[str] = mapped_column(
        String(Limits.MAX_EMAIL_LENGTH), nullable=False, unique=True
    )
    status: Mapped[str] = mapped_column(
        String(Limits.MAX_STATUS_LENGTH),
        nullable=False,
        default=UserStatus.INACTIVE.value,
        server_default=UserStatus.INACTIVE.value,
        index=True,
    )
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    phone: Mapped[Optional[str]] = mapped_column(String(Limits.MAX_PHONE_LENGTH))

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', status='{self.status}')>"
