"""
Database configuration and session management.
Uses SQLAlchemy 2.0 synchronous sessions; one session per request.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from shared.config.settings import settings


def _engine_options() -> dict[str, Any]:
    """Engine keyword arguments for the configured backend."""
    if settings.is_sqlite:
        # SQLite connections are shared across the request thread pool
        return {
            "connect_args": {"check_same_thread": False},
            "echo": settings.db_echo,
        }

    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": 30,  # Wait max 30s for connection from pool
        "pool_recycle": settings.db_pool_recycle,
        "echo": settings.db_echo,
    }


def build_engine(url: str | None = None) -> Engine:
    """Create an engine for the given URL (defaults to DATABASE_URL)."""
    return create_engine(url or settings.database_url, **_engine_options())


# Shared by every request handler; read-only after import
engine = build_engine()

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.scalars(select(Item)).all()

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            db.scalars(select(Item)).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
