# app/errors.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Internal Server Error"


# ---------------------------
# Error taxonomy
# ---------------------------
class ApiError(Exception):
    """Base for every failure that maps onto a known status code."""

    name = "ApiError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    name = "ValidationError"
    status_code = 400


class MalformedRequestError(ApiError):
    name = "MalformedRequestError"
    status_code = 400


class AuthenticationError(ApiError):
    name = "AuthenticationError"
    status_code = 401

    def __init__(self, message: str, reason: str = "invalid"):
        super().__init__(message)
        self.reason = reason


class NotFoundError(ApiError):
    name = "NotFoundError"
    status_code = 404


class ConflictError(ApiError):
    name = "ConflictError"
    status_code = 409


class InternalError(ApiError):
    name = "InternalError"
    status_code = 500


# ---------------------------
# Normalizer
# ---------------------------
def error_body(name: str, message: str, status_code: int, request: Request) -> Dict[str, Any]:
    return {
        "error": {
            "name": name,
            "message": message,
            "statusCode": status_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "method": request.method,
        }
    }


def _respond(request: Request, name: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(name, message, status_code, request))


def install_error_handlers(app: FastAPI, production: bool = False) -> None:
    """Route every failure raised by a handler into the one canonical error shape.

    Known ``ApiError`` kinds keep their message and status. Starlette's own
    HTTP errors (unknown route, wrong method) are reshaped too. Anything else
    is an ``InternalError``; its message is replaced by a generic string when
    ``production`` is set.
    """

    async def handle_api_error(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _respond(request, exc.name, exc.message, exc.status_code)

    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        name = NotFoundError.name if exc.status_code == 404 else "HTTPError"
        return _respond(request, name, str(exc.detail), exc.status_code)

    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _respond(request, ValidationError.name, message, ValidationError.status_code)

    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = GENERIC_MESSAGE if production else (str(exc) or exc.__class__.__name__)
        return _respond(request, InternalError.name, message, InternalError.status_code)

    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
