"""
Sample data for development.
Inserts three users when the users table is empty.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import User
from shared.config.constants import UserStatus
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit

logger = get_logger(__name__)


SAMPLE_USERS = [
    {"name": "Zhang San", "email": "zhangsan@example.com", "age": 25,
     "phone": "13800138000", "status": UserStatus.ACTIVE.value},
    {"name": "Li Si", "email": "lisi@example.com", "age": 30,
     "phone": "13800138001", "status": UserStatus.ACTIVE.value},
    {"name": "Wang Wu", "email": "wangwu@example.com", "age": 28,
     "phone": "13800138002", "status": UserStatus.INACTIVE.value},
]


def seed_sample_users(db: Session) -> int:
    """
    Insert SAMPLE_USERS unless the table already has rows (deleted ones included).

    Returns the number of users inserted.
    """
    existing = db.scalar(select(func.count()).select_from(User)) or 0
    if existing:
        logger.info("Seed skipped: users table not empty", existing=existing)
        return 0

    db.add_all(User(**data) for data in SAMPLE_USERS)
    safe_commit(db)
    logger.info("Sample users created", count=len(SAMPLE_USERS))
    return len(SAMPLE_USERS)
