"""
Typed HTTP exceptions shared by every router.

Each exception carries the HTTP status (`code`), a numeric `error_code` and a
message. `register_error_handlers` turns them into the JSON envelope
`{"error_code", "msg", "url"}`; `Success` is returned from handlers directly
through `response()`.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class HttpException(Exception):
    code = 500
    error_code = 999
    msg: Any = "unknown server error"

    def __init__(self, msg: Any = None, error_code: Optional[int] = None, code: Optional[int] = None):
        if msg is not None:
            self.msg = msg
        if error_code is not None:
            self.error_code = error_code
        if code is not None:
            self.code = code
        super().__init__(self.msg if isinstance(self.msg, str) else str(self.msg))

    def body(self, request: Request | None = None) -> dict:
        url = f"{request.method} {request.url.path}" if request is not None else ""
        return {"error_code": self.error_code, "msg": self.msg, "url": url}

    def response(self, request: Request | None = None) -> JSONResponse:
        return JSONResponse(status_code=self.code, content=self.body(request))


class Success(HttpException):
    code = 201
    error_code = 0
    msg = "success"


class Failed(HttpException):
    code = 400
    error_code = 9999
    msg = "failed"


class AuthFailed(HttpException):
    code = 401
    error_code = 10000
    msg = "authentication failed"


class NotFound(HttpException):
    code = 404
    error_code = 10020
    msg = "resource not found"


class ParametersException(HttpException):
    code = 400
    error_code = 10030
    msg = "invalid parameters"


class InvalidTokenException(HttpException):
    code = 401
    error_code = 10040
    msg = "invalid token"


class ExpiredTokenException(HttpException):
    code = 422
    error_code = 10050
    msg = "token expired"


class RepeatException(HttpException):
    code = 400
    error_code = 10060
    msg = "duplicate field"


class Forbidden(HttpException):
    code = 401
    error_code = 10070
    msg = "forbidden"


class MethodNotAllowed(HttpException):
    code = 405
    error_code = 10080
    msg = "method not allowed"
