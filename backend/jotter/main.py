"""
Jotter Backend: FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn jotter.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌────────────┐ ┌─────────┐    │
    │  │   CORS   │→│ Req ID   │→│ Rate Limit │→│ Logging │    │
    │  └──────────┘ └──────────┘ └────────────┘ └─────────┘    │
    │                                                          │
    │  Routes (under API_PREFIX):                              │
    │  /health  /signup  /profile  /profile/password           │
    │  /notes   /notes/{id}                                    │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→401 │ NotFound→404 │ RateLimit→429│
    │  Internal→500   │ anything else→500                      │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report missing auth provider configuration (does not exit)
    3. Create the kv_store table when DB_AUTO_CREATE is set

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jotter import __version__
from jotter.config import settings
from jotter.database import create_tables, dispose_engine
from jotter.dependencies import check_route_guard
from jotter.exceptions import (
    AuthError,
    InternalError,
    JotterError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from jotter.middleware.logging import RequestLoggingMiddleware
from jotter.middleware.rate_limit import RateLimitMiddleware
from jotter.middleware.request_id import RequestIDMiddleware, request_id_var
from jotter.routes import health, notes, profile, signup

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party libraries log every connection and statement at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("Jotter Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health stays up and auth calls fail with 500
        logger.error("Configuration error: %s", str(e))

    if settings.db_auto_create:
        await create_tables()
        logger.info("Key-value table '%s' ensured", settings.kv_table_name)

    logger.info("Server ready at http://%s:%d%s", settings.backend_host, settings.backend_port, settings.api_prefix)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Jotter Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(exc: JotterError, message: Optional[str] = None) -> dict:
    """Standard error payload; `message` overrides the exception's own text."""
    return {
        "error": exc.error_code,
        "message": message or exc.message,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the standard error body.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        AuthError                                → 401 (+ WWW-Authenticate)
        NotFoundError                            → 404
        RateLimitExceededError                   → 429 (+ Retry-After)
        InternalError (StorageError, AuthProviderError) → 500, generic message
        Exception (fallback)                     → 500, generic message

    Internal details (context, stack traces) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        body = error_body(exc)
        if exc.field:
            body["details"] = {"field": exc.field}
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON or wrong field types; reported as a single message."""
        try:
            await check_route_guard(request)
        except AuthError as auth_exc:
            return await handle_auth_error(request, auth_exc)
        except InternalError as internal_exc:
            return await handle_internal_error(request, internal_exc)

        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=error_body(ValidationError(message=message)),
        )

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        logger.warning("[%s] Auth error on %s: %s", request_id_var.get(""), request.url.path, exc.message)
        return JSONResponse(
            status_code=401,
            content=error_body(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body(exc))

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        body = error_body(exc)
        body["details"] = {"retry_after": exc.retry_after}
        return JSONResponse(
            status_code=429,
            content=body,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(InternalError)
    async def handle_internal_error(request: Request, exc: InternalError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(exc, message="Internal server error"),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(InternalError(), message="Internal server error"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Jotter API",
        description=(
            "Personal notes with deadlines and tags. Identity is delegated to a "
            "managed auth provider; notes and profiles live in a key-value store."
        ),
        version=__version__,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → RequestID → RateLimit → Logging
    # 429s still carry X-Request-ID and CORS headers
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed responses with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["Content-Length", "X-Request-ID", "Retry-After"],
        max_age=600,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    prefix = settings.api_prefix
    app.include_router(health.router, prefix=prefix)
    app.include_router(signup.router, prefix=prefix)
    app.include_router(profile.router, prefix=prefix)
    app.include_router(notes.router, prefix=prefix)

    return app


# uvicorn expects `jotter.main:app` to be importable
app = create_app()
