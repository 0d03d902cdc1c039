"""
Error taxonomy and the JSON error contract.

Every error that reaches a client has the shape ``{"message": str}`` and a
status code drawn from the exception class:

- 400: invalid input, exam outside its active window, attempt already completed
- 401: no resolvable identity
- 403: wrong role, or not the owner/subject of the resource
- 404: user, exam or attempt does not exist
- 500: anything unexpected (no internal detail is returned)
"""
import functools
import logging
from typing import Callable

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PortalError(Exception):
    """Base exception for expected, user-facing failures"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)


class Unauthenticated(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class Forbidden(PortalError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access forbidden"):
        super().__init__(message)


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class NoAttempt(NotFound):
    def __init__(self, message: str = "No attempt found for this student"):
        super().__init__(message)


class ValidationError(PortalError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message)


class AlreadyCompleted(ValidationError):
    def __init__(self, message: str = "You have already completed this exam"):
        super().__init__(message)


class InternalError(PortalError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class DuplicateAttempt(Exception):
    """The store refused a second attempt for the same (exam, student) pair."""

    def __init__(self, exam_id: str, user_id: str):
        self.exam_id = exam_id
        self.user_id = user_id
        super().__init__(f"Attempt already exists for exam {exam_id} and user {user_id}")


def error_body(message: str) -> dict:
    return {"message": message}


def guarded(failure_message: str) -> Callable:
    """
    Route decorator: expected errors pass through untouched, anything else
    is logged with its traceback and replaced by an ``InternalError``
    carrying ``failure_message``.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except (PortalError, HTTPException):
                raise
            except Exception:
                logger.exception("%s failed", func.__name__)
                raise InternalError(failure_message)
        return wrapper
    return decorator


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s -> %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content=error_body(message), headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field = ".".join(str(part) for part in errors[0]["loc"][1:]) if errors else ""
    message = f"Invalid value for {field}" if field else "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
