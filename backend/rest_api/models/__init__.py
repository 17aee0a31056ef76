"""
SQLAlchemy ORM Models Package.

- base: Base class, TimestampMixin, SoftDeleteMixin
- user: User
"""

from .base import Base, SoftDeleteMixin, TimestampMixin, utcnow
from .user import User

__all__ = [
    "Base",
    "SoftDeleteMixin",
    "TimestampMixin",
    "utcnow",
    "User",
]
