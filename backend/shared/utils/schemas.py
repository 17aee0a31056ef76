"""
Shared Pydantic schemas used across the application.

Create schemas bind POST bodies, update schemas bind PUT bodies (every field
optional, partial merge), output schemas serialize ORM rows.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from shared.config.constants import Limits


# =============================================================================
# Envelope Schemas
# =============================================================================


class PaginationInfo(BaseModel):
    """Pagination block attached to list responses."""

    page: int
    page_size: int
    total: int


class Envelope(BaseModel):
    """
    Uniform response body.

    ``code`` is 0 on success; otherwise it carries the error category
    (equal to the HTTP status). ``data`` and ``pagination`` are omitted when absent.
    """

    code: int = 0
    msg: str = "success"
    data: Any = None
    pagination: PaginationInfo | None = None


# =============================================================================
# User Schemas
# =============================================================================


class UserCreate(BaseModel):
    """POST /users/ body."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    status: str | None = Field(default=None, max_length=Limits.MAX_STATUS_LENGTH)
    age: int | None = Field(default=None, ge=0, le=Limits.MAX_AGE)
    phone: str | None = Field(default=None, max_length=Limits.MAX_PHONE_LENGTH)


class UserUpdate(BaseModel):
    """PUT /users/{id} body. Only non-empty fields are applied."""

    name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr | None = None
    status: str | None = Field(default=None, max_length=Limits.MAX_STATUS_LENGTH)
    age: int | None = Field(default=None, ge=0, le=Limits.MAX_AGE)
    phone: str | None = Field(default=None, max_length=Limits.MAX_PHONE_LENGTH)


class UserOutput(BaseModel):
    """User as returned by every users endpoint."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    status: str
    age: int
    phone: str | None = None
    created_at: datetime
    updated_at: datetime


class UserStats(BaseModel):
    """GET /users/stats payload."""

    total: int
    active: int
    inactive: int
