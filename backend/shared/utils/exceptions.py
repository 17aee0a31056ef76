"""
Centralized HTTP exceptions for consistent error handling.

Every exception carries the HTTP status and the application ``code`` written
into the response envelope (the two are equal in the base design). The
exception handlers in ``rest_api.core.errors`` render them.

Usage:
    from shared.utils.exceptions import NotFoundError, BadRequestError

    raise NotFoundError("User", user_id)
    raise BadRequestError("Age must be positive", field="age", value=-1)
"""

from typing import Any, Iterable

from fastapi import HTTPException, status

from shared.config.constants import Messages
from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)


def format_validation_errors(errors: Iterable[dict[str, Any]]) -> str:
    """
    Flatten pydantic/FastAPI error dicts into ``"loc: msg; loc: msg"``.

    The leading ``body`` location segment is dropped.
    """
    parts = []
    for error in errors or ():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        msg = error.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        code: int | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = status_code if code is None else code


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class BadRequestError(AppException):
    """
    Malformed input or failed domain precondition (400).

    Usage:
        raise BadRequestError("Age must be positive")
        raise BadRequestError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidIdError(BadRequestError):
    """Missing or unparsable primary key in the request path."""

    def __init__(self, raw_id: str | None = None, **log_context: Any):
        detail = Messages.MISSING_ID if not raw_id else Messages.INVALID_ID
        super().__init__(detail, raw_id=raw_id, **log_context)


class PayloadValidationError(BadRequestError):
    """
    Request body could not be bound to the entity schema.

    Accepts the ``errors()`` list of a pydantic ValidationError, or a plain reason.
    """

    def __init__(
        self,
        errors: Iterable[dict[str, Any]] | None = None,
        reason: str | None = None,
        **log_context: Any,
    ):
        parts = [reason] if reason else []
        formatted = format_validation_errors(errors or ())
        if formatted:
            parts.append(formatted)

        detail = Messages.MALFORMED_PAYLOAD
        if parts:
            detail = f"{detail}: {'; '.join(parts)}"
        super().__init__(detail, **log_context)


class UnknownFieldError(BadRequestError):
    """Filter or ordering refers to a field the entity does not have."""

    def __init__(self, field: str, entity: str, **log_context: Any):
        super().__init__(
            f"Unknown field '{field}' for {entity}",
            field=field,
            entity=entity,
            **log_context,
        )


class DuplicateEntityError(BadRequestError):
    """
    Entity with the same unique value already exists.

    Usage:
        raise DuplicateEntityError("User", "email", payload.email, detail=Messages.EMAIL_TAKEN)
    """

    def __init__(
        self,
        entity: str,
        field: str,
        value: Any = None,
        detail: str | None = None,
        **log_context: Any,
    ):
        if detail is None:
            detail = f"{entity} with {field} '{value}' already exists"
        super().__init__(detail, entity=entity, field=field, **log_context)


# =============================================================================
# 401 / 403 Errors (produced by add-ons, never by the CRUD operations)
# =============================================================================


class UnauthorizedError(AppException):
    """Authentication required or failed (401)."""

    def __init__(self, detail: str = "Authentication required", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("delete users")
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not allowed to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    No row for the given primary key (404).

    Usage:
        raise NotFoundError("User", 123)
    """

    def __init__(self, entity: str | None = None, entity_id: Any = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=Messages.NOT_FOUND,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to build report", report_id=123)
    """

    def __init__(self, detail: str = Messages.INTERNAL_ERROR, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """
    Storage engine fault during a named operation.

    The driver message (SQL text and bound values) only goes to the log;
    debug mode adds the exception class name to the client detail.
    """

    def __init__(self, operation: str, error: Exception | None = None, **log_context: Any):
        detail = f"{operation} failed"
        if error is not None and settings.debug:
            detail = f"{detail}: {type(error).__name__}"
        super().__init__(
            detail,
            operation=operation,
            error=repr(error) if error is not None else None,
            **log_context,
        )
