"""
RICHIEAT Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn richieat.main:app`) and the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Request Pipeline (declared order, see middleware/pipeline)│
    │  RequestID → AccessLog → SecurityLog → CORS → BodyLimit   │
    │                                                           │
    │  Routes:                                                  │
    │  GET /   /api/auth/*   /api/clients/*                     │
    │                                                           │
    │  Exception Handlers:                                      │
    │  Validation→400  Auth→401/409  NotFound→404  Body→413     │
    │  Database→500  Unhandled→500  Unmatched route→404         │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config validation → background DB connect loop
    Shutdown: cancel the connect loop → dispose engine
"""

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from richieat import __version__
from richieat.config import Settings, settings
from richieat.database import connect_with_retry, dispose_engine
from richieat.exceptions import (
    DatabaseError,
    PayloadTooLargeError,
    RichieatError,
)
from richieat.middleware.errors import error_response
from richieat.middleware.logging import client_ip
from richieat.middleware.pipeline import RequestPipeline, default_pipeline
from richieat.middleware.request_id import current_request_id
from richieat.routes import auth, clients, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the whole process, once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Access and security lines go to the `richieat.access` and
    `richieat.security` loggers so they can be routed separately.
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

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
    logger.info("=" * 50)
    logger.info("RICHIEAT Backend Server Starting...")
    logger.info("Environment: %s", settings.environment)
    logger.info("Port: %d", settings.port)
    logger.info("=" * 50)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        if settings.is_production:
            raise

    # Serve requests (health check included) while the database comes up.
    connector = asyncio.create_task(connect_with_retry())

    logger.info("API Base URL: http://%s:%d/api", settings.host, settings.port)
    logger.info("Server startup complete")

    yield

    logger.info("RICHIEAT Backend shutting down...")
    connector.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await connector
    await dispose_engine()
    logger.info("Database connection closed")
    logger.info("Server shutdown complete")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """
    Map exceptions to the JSON error envelope.

    Handler hierarchy:
        RequestValidationError  → 400 (malformed JSON or schema violation)
        DatabaseError           → 500, generic message
        RichieatError (+ subs)  → exc.status_code (400/401/404/409/413)
        HTTPException           → 404 "Route not found" for unmatched routes,
                                  otherwise the exception's status
        Exception               → 500; detail only outside production

    Every response carries `requestId` and the X-Request-ID header.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            logger.warning("[%s] Malformed JSON body", current_request_id(request))
            return error_response(
                request.scope, 400, "validation_error", "Malformed JSON in request body"
            )

        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
                "message": err.get("msg", "Invalid value"),
            }
            for err in errors
        ]
        logger.warning("[%s] Validation error: %s", current_request_id(request), details)
        return error_response(
            request.scope, 400, "validation_error", "Validation failed", details=details
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            current_request_id(request),
            exc.message,
            exc.context,
        )
        return error_response(
            request.scope,
            500,
            exc.error_code,
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(RichieatError)
    async def handle_application_error(request: Request, exc: RichieatError):
        logger.warning(
            "[%s] %s (%d): %s | Context: %s",
            current_request_id(request),
            type(exc).__name__,
            exc.status_code,
            exc.message,
            exc.context,
        )
        return error_response(request.scope, exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.__cause__, PayloadTooLargeError):
            too_large = exc.__cause__
            return error_response(
                request.scope, too_large.status_code, too_large.error_code, too_large.message
            )
        if exc.status_code == 404:
            logger.warning(
                "404 - Route not found: %s %s from IP: %s",
                request.method,
                request.url.path,
                client_ip(request),
            )
            return error_response(request.scope, 404, "not_found", "Route not found")
        return error_response(
            request.scope, exc.status_code, "http_error", str(exc.detail)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Terminal handler for anything uncaught.

        Full stack trace is logged server-side; the client sees the exception
        text only outside production.
        """
        advisor_id = getattr(request.state, "advisor_id", None)
        logger.error(
            "[%s] Unhandled error in %s %s%s: %s",
            current_request_id(request),
            request.method,
            request.url.path,
            f" (Advisor: {advisor_id})" if advisor_id else "",
            str(exc),
            exc_info=exc,
        )
        detail = "Internal server error" if app_settings.is_production else str(exc)
        return error_response(
            request.scope,
            500,
            "internal_server_error",
            "Something went wrong!",
            extra={"detail": detail},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    pipeline: Optional[RequestPipeline] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build from (defaults to the module singleton)
        pipeline: Request pipeline override (defaults to the full chain)
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="RICHIEAT API",
        description="Advisor authentication and client management API.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    (pipeline or default_pipeline(app_settings)).install(app)

    register_exception_handlers(app, app_settings)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(clients.router)

    return app


app = create_app()
