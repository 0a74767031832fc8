"""
HTTP error handling.

Maps domain exceptions to status codes and registers FastAPI exception
handlers, so every error leaves the API as

    {"success": false, "message": "..."}

with no stack trace or internal detail. Unexpected exceptions are logged
with traceback and answered with a generic message.

Usage:
    from utils.error_handler import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from exceptions import (
    ShopException,
    ShopValidationException,
    NotFoundException,
    InvalidOrderStateException,
    PaymentNotCompletedException,
    WebhookSignatureException,
    UnauthenticatedException,
    ForbiddenException,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Internal server error"

# Checked in order; the first matching base class wins
STATUS_MAPPING: list[tuple[type[ShopException], int]] = [
    (ShopValidationException, status.HTTP_400_BAD_REQUEST),
    (NotFoundException, status.HTTP_404_NOT_FOUND),
    (PaymentNotCompletedException, status.HTTP_400_BAD_REQUEST),
    (WebhookSignatureException, status.HTTP_400_BAD_REQUEST),
    (InvalidOrderStateException, status.HTTP_409_CONFLICT),
    (UnauthenticatedException, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenException, status.HTTP_403_FORBIDDEN),
]


def get_status_code(exception: ShopException) -> int:
    """
    HTTP status for a domain exception; 500 for anything not mapped.

    Example:
        >>> get_status_code(OrderNotFoundException("abc"))
        404
    """
    for exception_class, status_code in STATUS_MAPPING:
        if isinstance(exception, exception_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


async def shop_exception_handler(request: Request, exc: ShopException) -> JSONResponse:
    status_code = get_status_code(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
        return error_response(status_code, GENERIC_ERROR_MESSAGE)

    logger.warning(f"{request.method} {request.url.path} -> {status_code}: {type(exc).__name__} - {exc}")
    message = exc.message
    if isinstance(exc, ShopValidationException) and exc.errors:
        message = f"{message}: {'; '.join(exc.errors)}"
    return error_response(status_code, message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        location = '.'.join(str(part) for part in err.get('loc', ()) if part != 'body')
        errors.append(f"{location}: {err.get('msg')}" if location else str(err.get('msg')))
    logger.warning(f"{request.method} {request.url.path} -> 400: {errors}")
    return error_response(status.HTTP_400_BAD_REQUEST, f"Invalid request: {'; '.join(errors)}")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {type(exc).__name__} - {exc}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopException, shop_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
