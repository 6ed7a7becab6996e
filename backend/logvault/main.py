from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from logvault.api.routes.logs import router as logs_router
from logvault.core.config import Settings, settings as default_settings
from logvault.core.errors import LogVaultError, ServerError, StorageInitError
from logvault.core.logging import configure_logging
from logvault.db.store import LogStore
from logvault.services.log_service import LogService

logger = logging.getLogger("logvault")


# -------------------------
# Response helpers
# -------------------------
def ok(data: Any = None, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"success": True, "data": data, "error": None, "meta": meta or {}}


def fail(
    code: str,
    message: str,
    details: Optional[Any] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "success": False,
        "data": None,
        "error": {"code": code, "message": message, "details": details},
        "meta": meta or {},
    }


# -------------------------
# App factory
# -------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application with its own LogStore.

    The store is opened in the lifespan startup phase and disposed at
    shutdown. A StorageInitError during startup aborts the process.
    """
    settings = settings or default_settings

    store = LogStore(settings.DATABASE_URL, busy_timeout_s=settings.DB_BUSY_TIMEOUT_S)
    log_service = LogService(store, default_page_size=settings.DEFAULT_PAGE_SIZE)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        try:
            await store.initialize()
        except StorageInitError:
            logger.critical("Log store could not be initialized; refusing to start.", exc_info=True)
            raise
        try:
            yield
        finally:
            await store.close()
            logger.info("Log store closed")

    app = FastAPI(
        title="logvault API",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.log_service = log_service

    # -------------------------
    # Middleware
    # -------------------------
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Request-id + timing + payload-size guard
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                too_large = int(content_length) > settings.MAX_PAYLOAD_BYTES
            except ValueError:
                too_large = False
            if too_large:
                return ORJSONResponse(
                    status_code=413,
                    content=fail(
                        code="PAYLOAD_TOO_LARGE",
                        message=f"Request body too large. Max is {settings.MAX_PAYLOAD_KB} KB.",
                        meta={"request_id": request_id},
                    ),
                    headers={"x-request-id": request_id},
                )

        response = await call_next(request)

        response.headers["x-request-id"] = request_id
        response.headers["x-response-ms"] = f"{(time.perf_counter() - start) * 1000:.2f}"
        return response

    # -------------------------
    # Routes
    # -------------------------
    @app.get("/health", response_class=ORJSONResponse)
    async def health():
        # Keep it tiny & fast: used by docker/k8s/reverse proxies
        return ok({"status": "ok", "env": settings.ENV})

    app.include_router(logs_router, tags=["logs"])

    # -------------------------
    # Error handling
    # -------------------------
    @app.exception_handler(LogVaultError)
    async def logvault_error_handler(request: Request, exc: LogVaultError):
        if isinstance(exc, ServerError):
            logger.error(
                "%s on %s %s: %s",
                exc.code,
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc,
            )
        else:
            logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)

        return ORJSONResponse(
            status_code=exc.status_code,
            content=fail(code=exc.code, message=exc.message),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

        # Show minimal debug info only in dev
        details = None
        if settings.ENV == "dev":
            details = {"type": exc.__class__.__name__, "message": str(exc)}

        return ORJSONResponse(
            status_code=500,
            content=fail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred.",
                details=details,
            ),
        )

    return app


app = create_app()
