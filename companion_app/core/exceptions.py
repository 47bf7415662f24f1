"""
Application errors.

Each error carries the HTTP status it maps to; the handler registered in
``companion_app.main`` renders them as plain-text responses.
"""
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from loguru import logger


class CompanionAppError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code: int = 500
    default_message: str = "Internal Error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(CompanionAppError):
    status_code = 401
    default_message = "Unauthorized"


class BadRequest(CompanionAppError):
    status_code = 400
    default_message = "Bad Request"


class Forbidden(CompanionAppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(CompanionAppError):
    status_code = 404
    default_message = "Not Found"


class InternalError(CompanionAppError):
    status_code = 500
    default_message = "Internal Error"


async def companion_app_error_handler(request: Request, exc: CompanionAppError) -> PlainTextResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected with {exc.status_code}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=headers)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    """Parameter errors FastAPI catches itself are answered as plain-text 400s too."""
    logger.info(f"{request.method} {request.url.path} rejected with 400: {exc.errors()}")
    return PlainTextResponse(BadRequest.default_message, status_code=400)
