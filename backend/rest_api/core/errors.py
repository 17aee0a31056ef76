"""
Exception handlers.

Every error leaves the API as one response envelope with the HTTP status
equal to ``code``:
- AppException subclasses: their own status and detail
- RequestValidationError (malformed JSON body, bad parameter types): 400
- Starlette HTTPException (unknown route, method not allowed): its status
- anything else: logged with traceback, 500

The catch-all Exception handler runs in ServerErrorMiddleware, outside the
correlation and CORS middlewares. Viewset operations convert their own
unexpected errors to InternalError so those responses keep both.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.config.constants import Messages
from shared.config.logging import get_logger
from shared.utils.exceptions import AppException, format_validation_errors
from rest_api.routers._common.response import error_with_status

logger = get_logger(__name__)


async def app_exception_handler(request: Request, exc: AppException):
    return error_with_status(exc.status_code, exc.code, exc.detail, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    detail = format_validation_errors(exc.errors())
    logger.warning(
        "Request validation failed",
        path=request.url.path,
        method=request.method,
        errors=detail,
    )
    msg = f"{Messages.MALFORMED_PAYLOAD}: {detail}" if detail else Messages.MALFORMED_PAYLOAD
    return error_with_status(status.HTTP_400_BAD_REQUEST, status.HTTP_400_BAD_REQUEST, msg)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_with_status(
        exc.status_code,
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=repr(exc),
        exc_info=exc,
    )
    return error_with_status(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        Messages.INTERNAL_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-rendering handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
