"""
Response envelope helpers.

Every endpoint answers with ``{code, msg, data?, pagination?}``:
- ``code == 0`` means success, ``msg == "success"``
- otherwise ``code`` carries the error category, equal to the HTTP status
- ``data`` and ``pagination`` are left out when there is nothing to send

Usage:
    from rest_api.routers._common.response import success, not_found

    return success(USER.serialize(user))
    return not_found("Record not found")

Errors raised as ``AppException`` subclasses are rendered through
``error_with_status`` by the handlers in ``rest_api.core.errors``.
"""

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from shared.config.constants import Messages
from shared.utils.schemas import PaginationInfo


def envelope(
    code: int,
    msg: str,
    data: Any = None,
    pagination: PaginationInfo | dict[str, int] | None = None,
) -> dict[str, Any]:
    """Build the envelope body, omitting absent ``data`` and ``pagination``."""
    body: dict[str, Any] = {"code": code, "msg": msg}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if pagination is not None:
        if isinstance(pagination, PaginationInfo):
            pagination = pagination.model_dump()
        body["pagination"] = pagination
    return body


def success(data: Any = None) -> JSONResponse:
    """HTTP 200, ``code=0``."""
    return JSONResponse(status_code=status.HTTP_200_OK, content=envelope(0, Messages.SUCCESS, data))


def success_with_pagination(data: Any, pagination: PaginationInfo) -> JSONResponse:
    """HTTP 200, ``code=0`` with the pagination block of a list response."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=envelope(0, Messages.SUCCESS, data, pagination),
    )


def error(code: int, msg: str) -> JSONResponse:
    """
    Error envelope sent with HTTP 200.

    Kept for callers that signal errors in-band only; prefer the
    status-matching helpers below.
    """
    return JSONResponse(status_code=status.HTTP_200_OK, content=envelope(code, msg))


def error_with_status(
    http_status: int,
    code: int,
    msg: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Error envelope sent with an explicit HTTP status."""
    return JSONResponse(status_code=http_status, content=envelope(code, msg), headers=headers)


def bad_request(msg: str) -> JSONResponse:
    return error_with_status(status.HTTP_400_BAD_REQUEST, status.HTTP_400_BAD_REQUEST, msg)


def unauthorized(msg: str) -> JSONResponse:
    return error_with_status(status.HTTP_401_UNAUTHORIZED, status.HTTP_401_UNAUTHORIZED, msg)


def forbidden(msg: str) -> JSONResponse:
    return error_with_status(status.HTTP_403_FORBIDDEN, status.HTTP_403_FORBIDDEN, msg)


def not_found(msg: str) -> JSONResponse:
    return error_with_status(status.HTTP_404_NOT_FOUND, status.HTTP_404_NOT_FOUND, msg)


def internal_server_error(msg: str) -> JSONResponse:
    return error_with_status(
        status.HTTP_500_INTERNAL_SERVER_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR, msg
    )
