"""
Quotely API — FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn quotely.main:app) and
       by the tests with an injected store.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                     FastAPI App                          │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐ ┌────────────┐  │
    │  │ Rate Limit │→│ Req ID   │→│ Logging │→│ GZip/CORS  │  │
    │  └────────────┘ └──────────┘ └─────────┘ └────────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  auth · user · quotes · proverbs · favorites · dashboard │
    │  contact · newsletter · health                           │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→401 │ NotFound→404 │ Store→500    │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the store handle unless one was injected
    Shutdown:
    1. Close the store handle if the lifespan created it
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quotely import __version__
from quotely.config import settings
from quotely.exceptions import (
    FAILURE_MESSAGE_ATTR,
    AlreadyExistsError,
    AuthError,
    NotFoundError,
    QuotelyError,
    RateLimitExceededError,
    StoreError,
    ValidationError,
)
from quotely.middleware.logging import RequestLoggingMiddleware
from quotely.middleware.rate_limit import RateLimitMiddleware
from quotely.middleware.request_id import RequestIDMiddleware, request_id_var
from quotely.routes import auth, contact, dashboard, favorites, health, proverbs, quotes
from quotely.store import StoreAdapter, create_store

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"
UNEXPECTED_ERROR = "An unexpected error occurred"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] quotely.access: GET /api/quotes 200 12.3ms
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request chatter from these libraries duplicates our access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Quotely API starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report the problem
        logger.error("Configuration error: %s", str(e))

    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = create_store(settings)
    logger.info("Store backend: %s", type(app.state.store).__name__)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Quotely API shutting down...")
    if owns_store:
        await app.state.store.close()
        app.state.store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "request_id": request_id_var.get("") or None},
        headers=headers,
    )


def failure_message_for(request: Request, default: str = GENERIC_SERVER_ERROR) -> str:
    """The 500 message tagged on the matched endpoint, if routing got that far."""
    endpoint = request.scope.get("endpoint")
    return getattr(endpoint, FAILURE_MESSAGE_ATTR, default)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the error envelope.

        ValidationError / RequestValidationError → 400
        AlreadyExistsError                       → 400
        AuthError                                → 401
        NotFoundError / unknown route            → 404
        RateLimitExceededError                   → 429
        StoreError (and subclasses)              → 500, endpoint's failure message
        QuotelyError / Exception                 → 500, endpoint's failure message

    Responses never include SQL, URLs, driver messages or stack traces;
    those are logged server-side with the request ID.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Validation failed"
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return error_response(400, message)

    @app.exception_handler(AlreadyExistsError)
    async def handle_already_exists(request: Request, exc: AlreadyExistsError):
        return error_response(400, exc.message)

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        return error_response(401, exc.message, headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return error_response(429, exc.message, headers={"Retry-After": str(exc.retry_after)})

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""), type(exc).__name__, exc.message, exc.context,
        )
        return error_response(500, failure_message_for(request))

    @app.exception_handler(QuotelyError)
    async def handle_quotely_error(request: Request, exc: QuotelyError):
        logger.error("[%s] %s: %s | Context: %s", request_id_var.get(""), type(exc).__name__, exc.message, exc.context)
        return error_response(500, failure_message_for(request))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = "Endpoint not found"
        elif exc.status_code == 405:
            message = "Method not allowed"
        else:
            message = str(exc.detail)
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return error_response(500, failure_message_for(request, UNEXPECTED_ERROR))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(store: Optional[StoreAdapter] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Pre-built StoreAdapter. When given, the app uses it as-is and
               the caller owns its lifecycle (tests pass a SQLite-backed or
               mocked store). Otherwise the lifespan builds one from settings.
    """
    app = FastAPI(
        title="Quotely API",
        description=(
            "Quotes and proverbs API: catalogue, favorites, likes, dashboard "
            "stats and trending quotes, backed by a relational row-store."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.store = store

    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(quotes.router)
    app.include_router(proverbs.router)
    app.include_router(favorites.router)
    app.include_router(dashboard.router)
    app.include_router(contact.router)

    return app


# uvicorn expects `quotely.main:app` to be importable
app = create_app()
