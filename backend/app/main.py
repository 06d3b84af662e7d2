"""
SVG Holder Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database handle and SvgService, registers
       middleware, exception handlers and routes, and returns the app.
Who:   Called by uvicorn (`uvicorn app.main:app`, or `python -m app`) and by tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │               → Upload size limit (POST /api/svgs)  │
    │                                                     │
    │  Routes:      /api/svgs (CRUD + search)             │
    │               /health, /api/health                  │
    │                                                     │
    │  Exception Handlers:                                │
    │    ValidationError → 400   NotFoundError → 404      │
    │    InternalError   → 500   unmatched route → 404    │
    └─────────────────────────────────────────────────────┘

Resources:
    app.state.settings     Settings used to build this app
    app.state.database     Database (engine + session factory), lazily connected
    app.state.svg_service  SvgService bound to that Database

Lifecycle:
    Startup:  configure logging, optionally create tables (DB_AUTO_CREATE)
    Shutdown: dispose the database engine
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

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import Database
from app.exceptions import InternalError, NotFoundError, SvgHolderError, ValidationError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.middleware.upload_limit import UploadLimitMiddleware
from app.routes import health, svgs
from app.services.svg_service import SvgService
from app.services.validation import SvgValidator

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("SVG Holder Backend %s starting up (%s)...", __version__, config.environment)

    if config.db_auto_create:
        await database.create_all()

    logger.info("SVG API: %s", config.api_prefix)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SVG Holder Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def failure_body(message: str, error: Optional[str] = None) -> dict:
    """Failure envelope; `error` is omitted when there is no detail to show."""
    body = {"success": False, "message": message}
    if error:
        body["error"] = error
    return body


def register_exception_handlers(app: FastAPI, config: Settings) -> None:
    """
    Map each failure class to its status code and envelope.

    Handler table:
        ValidationError         → 400 (message is user-facing and specific)
        RequestValidationError  → 400 (body/form could not be parsed)
        NotFoundError           → 404 "SVG not found"
        HTTPException 404/405   → 404 "Route not found"
        InternalError           → 500 (detail only outside production)
        SvgHolderError (base)   → its status_code
        Exception (fallback)    → 500
    """

    def detail_for(exc: BaseException) -> Optional[str]:
        if config.is_production:
            return None
        if isinstance(exc, InternalError):
            return exc.detail
        return str(exc) or type(exc).__name__

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content=failure_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request: %s", rid, exc.errors())
        return JSONResponse(
            status_code=400,
            content=failure_body("Invalid request", None if config.is_production else str(exc.errors())),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=failure_body(exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content=failure_body("Route not found"))
        return JSONResponse(
            status_code=exc.status_code,
            content=failure_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(InternalError)
    async def handle_internal_error(request: Request, exc: InternalError):
        rid = request_id_var.get("")
        logger.error("[%s] Internal error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=failure_body(exc.message, detail_for(exc)),
        )

    @app.exception_handler(SvgHolderError)
    async def handle_app_error(request: Request, exc: SvgHolderError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s", rid, exc.message)
        return JSONResponse(status_code=exc.status_code, content=failure_body(exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=failure_body("Internal server error", detail_for(exc) or "Something went wrong"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:   Settings to use (defaults to the environment-loaded settings)
        database: Pre-built Database handle (tests pass one bound to SQLite)

    Returns:
        Fully configured FastAPI instance ready to receive requests.
    """
    config = config or default_settings
    database = database or Database(config)

    app = FastAPI(
        title="SVG Holder API",
        description="Upload, browse, search, rename and delete SVG images.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.database = database
    app.state.svg_service = SvgService(database, SvgValidator(config.max_file_size))

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → UploadLimit
    upload_path = config.api_prefix.rstrip("/")
    app.add_middleware(
        UploadLimitMiddleware,
        upload_paths={upload_path, upload_path + "/"},
        max_file_size=config.max_file_size,
        form_overhead=config.upload_form_overhead,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, config)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(svgs.router, prefix=config.api_prefix)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
