"""
Notewise Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers and
       returns the app; lifespan() handles startup and shutdown.
Who:   Served by uvicorn (uvicorn app.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware Chain:                                        │
    │  ┌────────────┐ ┌────────────┐ ┌──────┐ ┌──────┐          │
    │  │ Request ID │→│ Access Log │→│ GZip │→│ CORS │          │
    │  └────────────┘ └────────────┘ └──────┘ └──────┘          │
    │                                                           │
    │  Routes:                                                  │
    │  ┌────────────┐ ┌─────────────────┐ ┌─────────────┐       │
    │  │ /api/notes │ │ /api/assistant  │ │ GET /health │       │
    │  └────────────┘ └─────────────────┘ └─────────────┘       │
    │                                                           │
    │  Exception Handlers:                                      │
    │  ┌─────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ NotFound→404 │ AI→503   │  │
    │  │ Config/DB/File→500 │ anything else→500              │  │
    │  └─────────────────────────────────────────────────────┘  │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check (warn, don't exit) → temp dir
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    ConfigurationError,
    DatabaseError,
    FileStorageError,
    NotewiseError,
    NotFoundError,
    UnauthenticatedError,
    UpstreamError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import assistant, health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2025-01-15T12:00:00 [INFO] app.services.note_service: Note ... created
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request chatter from libraries; our access log covers requests
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Notewise Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: note CRUD and /health work without the AI settings
        logger.error("Configuration error: %s", str(e))
        logger.error("AI actions or sign-in will fail until this is fixed.")

    tmp_dir = Path(settings.upload_tmp_dir)
    tmp_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload scratch directory: %s", tmp_dir.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Notewise Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Build the standard error body: {error, message, details?, request_id}."""
    content: Dict[str, Any] = {"error": error, "message": message}
    if details:
        content["details"] = details
    content["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler table:
        ValidationError        → 400 validation_error
        UnauthenticatedError   → 401 unauthenticated
        NotFoundError          → 404 not_found
        ConfigurationError     → 500 configuration_error
        DatabaseError          → 500 server_error (generic message)
        FileStorageError       → 500 server_error
        UpstreamError          → 503 upstream_error
        NotewiseError (base)   → 500 server_error
        Exception (fallback)   → 500 internal_server_error

    Only 4xx responses include `details`; context of server-side failures
    is logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return error_response(401, "unauthenticated", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s", request_id_var.get(""), exc.message)
        return error_response(500, "configuration_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return error_response(
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(request: Request, exc: UpstreamError):
        logger.error(
            "[%s] AI service error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return error_response(503, "upstream_error", exc.message)

    @app.exception_handler(NotewiseError)
    async def handle_application_error(request: Request, exc: NotewiseError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Notewise API",
        description=(
            "Personal notes with AI assistance: ask questions about your notes, "
            "summarize PDFs and get suggested questions, powered by Google Gemini."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS

    # Credentials allowed so the browser sends the Supabase session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(assistant.router)
    app.include_router(health.router)

    return app


app = create_app()
