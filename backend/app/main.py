"""
SnippetHub Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       bound to a `Database` handle (built from settings, or injected).
Who:   uvicorn (`uvicorn app.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware:  Request ID → Logging → GZip → CORS        │
    │                                                         │
    │  Routes:                                                │
    │   /api/snippets/export|import|validate-import           │
    │   /api/snippets  /api/tags  /api/favorites              │
    │   /api/analytics  /health                               │
    │                                                         │
    │  Exception Handlers:                                    │
    │   Validation→400 │ NotFound→404 │ Conflict→409 │ 500    │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → connect database → create missing tables
    Shutdown: dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import Database
from app.exceptions import (
    ConflictError,
    DatabaseError,
    ImportTransactionError,
    NotFoundError,
    SnippetHubError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import analytics, favorites, health, snippets, tags, transfer

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole application.

    Format: 2024-01-15T12:00:00 [INFO] app.services.transfer_service: ...
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    database: Database = app.state.database
    logger.info("=" * 60)
    logger.info("SnippetHub Backend %s starting up...", __version__)

    database.connect()
    if settings.db_auto_create:
        await database.create_all()
        logger.info("Database schema ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SnippetHub Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, error: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

        ValidationError          → 400 (ImportValidationError: report in details)
        NotFoundError            → 404
        ConflictError            → 409 (context in details, e.g. usage_count)
        ImportTransactionError   → 500 (import rolled back)
        DatabaseError            → 500 (generic message, context logged)
        SnippetHubError (base)   → 500
        Exception (fallback)     → 500, traceback logged

    Responses never carry stack traces or SQL.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        return _error(409, "conflict", exc.message, exc.context)

    @app.exception_handler(ImportTransactionError)
    async def handle_import_failure(request: Request, exc: ImportTransactionError):
        logger.error("[%s] Import rolled back: %s", request_id_var.get(""), exc.message)
        return _error(500, "import_failed", "Import failed; no changes were saved.")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(SnippetHubError)
    async def handle_app_error(request: Request, exc: SnippetHubError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return _error(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Store handle to serve from. Defaults to one built from
                  settings; tests pass an already-connected handle.
    """
    app = FastAPI(
        title="SnippetHub API",
        description=(
            "Personal code-snippet manager: versioned snippets with diffs and "
            "rollback, tags, favorites, JSON/Markdown export and JSON import."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.database = database or Database(
        settings.database_url,
        echo=settings.log_level == "DEBUG",
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    # transfer before snippets: /api/snippets/export must not match /{snippet_id}
    app.include_router(transfer.router)
    app.include_router(snippets.router)
    app.include_router(tags.router)
    app.include_router(favorites.router)
    app.include_router(analytics.router)
    app.include_router(health.router)

    return app


app = create_app()
