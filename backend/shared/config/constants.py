"""
Application-wide constants: limits, reserved query parameters, enums and messages.
"""

from enum import Enum
from typing import Final


class Limits:
    """Validation limits."""

    # Pagination
    DEFAULT_PAGE: Final[int] = 1
    DEFAULT_PAGE_SIZE: Final[int] = 10
    MIN_PAGE_SIZE: Final[int] = 1
    MAX_PAGE_SIZE: Final[int] = 100
    DEFAULT_OFFSET: Final[int] = 0

    # Storage integers are signed 64-bit
    MAX_SQL_INTEGER: Final[int] = 2**63 - 1
    MIN_SQL_INTEGER: Final[int] = -(2**63)

    # Search
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100

    # User model column sizes
    MAX_NAME_LENGTH: Final[int] = 100
    MAX_EMAIL_LENGTH: Final[int] = 100
    MAX_STATUS_LENGTH: Final[int] = 20
    MAX_PHONE_LENGTH: Final[int] = 20
    MAX_AGE: Final[int] = 2**31 - 1


class QueryParams:
    """Query-string keys with special meaning on list endpoints."""

    PAGE: Final[str] = "page"
    PAGE_SIZE: Final[str] = "page_size"
    LIMIT: Final[str] = "limit"
    OFFSET: Final[str] = "offset"
    ORDER_BY: Final[str] = "order_by"
    ORDERING: Final[str] = "ordering"

    # Optional multi-field fuzzy search (only for entities declaring search fields)
    SEARCH: Final[str] = "search"
    # User list keyword search
    KEYWORD: Final[str] = "keyword"

    # Never treated as equality filters
    RESERVED: Final[frozenset[str]] = frozenset(
        {PAGE, PAGE_SIZE, LIMIT, OFFSET, ORDER_BY, ORDERING}
    )


class OrderDirection(str, Enum):
    """Sort direction of an order clause."""

    ASC = "ASC"
    DESC = "DESC"


class UserStatus(str, Enum):
    """Account status of a user."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Messages:
    """User-visible response messages."""

    SUCCESS: Final[str] = "success"
    MISSING_ID: Final[str] = "Missing ID parameter"
    INVALID_ID: Final[str] = "Invalid ID"
    NOT_FOUND: Final[str] = "Record not found"
    MALFORMED_PAYLOAD: Final[str] = "Malformed request payload"
    DELETED: Final[str] = "Deleted successfully"
    INTERNAL_ERROR: Final[str] = "Internal server error"

    EMAIL_TAKEN: Final[str] = "Email already registered"
    USER_ACTIVATED: Final[str] = "User activated"
    USER_DEACTIVATED: Final[str] = "User deactivated"
    PASSWORD_RESET_SENT: Final[str] = "Password reset email sent"
