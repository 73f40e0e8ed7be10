"""
Global exception handlers.

Domain errors (`HttpException`) keep their own status and error_code, request
validation failures become `ParametersException` envelopes and anything else
is reported as a generic 500 without internal details.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from cms.core.exceptions import HttpException, MethodNotAllowed, NotFound, ParametersException

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(HttpException)
    async def http_exception_handler(request: Request, exc: HttpException):
        logger.warning(
            "%s %s -> %s (%s): %s",
            request.method,
            request.url.path,
            exc.code,
            exc.error_code,
            exc.msg,
        )
        return exc.response(request)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return ParametersException(msg=_validation_messages(exc)).response(request)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return NotFound().response(request)
        if exc.status_code == 405:
            return MethodNotAllowed().response(request)
        return HttpException(msg=str(exc.detail), code=exc.status_code).response(request)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return HttpException().response(request)


def _validation_messages(exc: RequestValidationError) -> dict:
    messages: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        msg = error.get("msg", "")
        # pydantic prefixes errors raised inside validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.setdefault(field, msg)
    return messages
