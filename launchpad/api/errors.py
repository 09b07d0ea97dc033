"""
Error handlers for the API

Every error response has the body {"error": "<message>"}.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import (
    LaunchpadError,
    ValidationError,
    PoolUnavailable,
    OperationNotSupported,
    InsufficientFunds,
)
from ..infra.retry import error_message

logger = logging.getLogger(__name__)

# Caller mistakes and requests the current network or pool cannot serve
CLIENT_ERRORS = (ValidationError, PoolUnavailable, OperationNotSupported, InsufficientFunds)


def status_for(exc: LaunchpadError) -> int:
    if isinstance(exc, CLIENT_ERRORS):
        return 400
    return 500


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def register_error_handlers(app: FastAPI) -> None:
    """Register global error handlers for the application"""

    @app.exception_handler(LaunchpadError)
    async def launchpad_error_handler(request: Request, exc: LaunchpadError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return error_response(status_code, error_message(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
        logger.warning(f"{request.method} {request.url.path} invalid request: {message}")
        return error_response(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Uncaught exception on {request.method} {request.url.path}")
        return error_response(500, str(exc))
