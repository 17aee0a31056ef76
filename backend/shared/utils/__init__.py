"""
Utilities module: Exceptions, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    BadRequestError,
    DatabaseError,
    DuplicateEntityError,
    ForbiddenError,
    InternalError,
    InvalidIdError,
    NotFoundError,
    PayloadValidationError,
    UnauthorizedError,
    UnknownFieldError,
    format_validation_errors,
)

__all__ = [
    "AppException",
    "BadRequestError",
    "DatabaseError",
    "DuplicateEntityError",
    "ForbiddenError",
    "InternalError",
    "InvalidIdError",
    "NotFoundError",
    "PayloadValidationError",
    "UnauthorizedError",
    "UnknownFieldError",
    "format_validation_errors",
]
