"""
api/main.py -- FastAPI application entry point for RecordGate.

Run with:      uvicorn asgi:app --reload
               python asgi.py

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- adds CORS headers for the browser client's origins
  2. log_requests    -- one log line per request with status and latency

Lifespan handles startup (storage connect probe) and shutdown (dispose the
engine pool) symmetrically. A failed probe does not stop the server: /health
keeps answering and data endpoints return 503 until a probe succeeds.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.users import router as users_router
from auth.errors import AuthError, InternalError, StorageUnavailableError, UnauthenticatedError
from auth.store import UserStore
from core.config import get_settings

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("recordgate.api")

VERSION = "0.1.0"

_settings = get_settings()

# HTTP status per AuthError code. Anything not listed is a 500.
_STATUS_BY_CODE: dict[str, int] = {
    "validation_error": 400,
    "invalid_credentials": 401,
    "unauthenticated": 401,
    "duplicate_user": 409,
    "storage_unavailable": 503,
    "internal_error": 500,
}


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the credential store on startup and dispose it on shutdown."""
    logger.info("RecordGate API starting up")
    store = UserStore(_settings.database_url, connect_timeout=_settings.db_connect_timeout)
    app.state.user_store = store
    if store.connect():
        logger.info("Credential store ready (%s)", store.database_name)
    else:
        logger.warning("Server is running but database is not connected -- data endpoints will return 503")

    yield

    store.close()
    logger.info("RecordGate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="RecordGate API",
    description="Account registration, bearer-token login, and protected account listing.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code, detail=detail).model_dump(exclude_none=True),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render flow and gate failures.

    Client errors carry the exception's own message. Storage and internal
    errors are logged with their cause here and the client sees only the
    generic default message, never the driver error or connection string.
    """
    status_code = _STATUS_BY_CODE.get(exc.code, 500)
    message = exc.message
    if isinstance(exc, (StorageUnavailableError, InternalError)):
        cause = exc.__cause__
        logger.error(
            "%s on %s %s%s",
            exc.code,
            request.method,
            request.url.path,
            f": {cause!r}" if cause is not None else "",
        )
        message = type(exc).default_message
    response = _error_response(status_code, exc.code, message)
    if isinstance(exc, UnauthenticatedError):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when the request body has the wrong shape."""
    return _error_response(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for FastAPI/Starlette HTTP exceptions (404, 405, ...)."""
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", InternalError.default_message)


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable.
# Re-probes the store, so a database that comes back is picked up here.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness and database connectivity."""
    store: UserStore = request.app.state.user_store
    connected = store.ping()
    return HealthResponse(
        message="RecordGate API is running",
        database="connected" if connected else "disconnected",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
