from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from cms.core.config import get_settings
from cms.core.error_handlers import register_error_handlers
from cms.core.observability import setup_logging
from cms.routers import admin as admin_router
from cms.routers import log as log_router
from cms.routers import user as user_router

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ApiResponseMiddleware(BaseHTTPMiddleware):
    """Tag every response with a request id and log its status and latency.

    Responses are JSON only, so they also get `nosniff` and `no-store`; HSTS is
    added when running in prod behind TLS.
    """

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        logger.info(
            "%s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={"path": request.url.path, "request_id": request_id, "duration_ms": duration_ms},
        )
        return response


def create_app() -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (`uvicorn cms.app:create_app --factory`)."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="CMS Admin API")
    if settings.app_env != "prod":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                "http://localhost:8080",
                "http://127.0.0.1:8080",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            ],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=[REQUEST_ID_HEADER],
        )
    app.add_middleware(ApiResponseMiddleware, enforce_hsts=settings.app_env == "prod")
    register_error_handlers(app)

    app.include_router(user_router.router)
    app.include_router(admin_router.router)
    app.include_router(log_router.router)
    logger.info("CMS admin API ready (env=%s)", settings.app_env)
    return app
