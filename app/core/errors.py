from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto a client-visible response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "bad_request"
    message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
    message = "Access denied. No token provided."


class AccountInactive(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "account_inactive"
    message = "This account has been deactivated."


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    message = "You are not allowed to modify this resource."


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    message = "Resource not found."


class BookNotFound(NotFound):
    code = "book_not_found"
    message = "Book not found."


class ReviewNotFound(NotFound):
    code = "review_not_found"
    message = "Review not found."


class UserNotFound(NotFound):
    code = "user_not_found"
    message = "User not found."


class DuplicateReview(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_review"
    message = "You have already reviewed this book."


class DuplicateEmail(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "email_exists"
    message = "User already exists with this email."


class InvalidQuery(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_query"
    message = "Search query must be at least 2 characters long."


def _error_body(
    message: str,
    code: str,
    errors: Optional[list[Any]] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message, "code": code}
    if errors is not None:
        body["errors"] = errors
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.code
    )
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.code))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("message", "Request failed.")
        code = detail.get("code", "http_error")
    else:
        message = str(detail)
        code = "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message, code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    logger.warning("Validation failed for %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(_error_body("Validation failed", "validation_failed", errors)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error.", "server_error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
