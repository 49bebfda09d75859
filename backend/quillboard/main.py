"""
Quillboard Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers.
       Run with `uvicorn quillboard.main:app` from the backend/ directory.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────────┐ ┌──────────┐ ┌──────────┐ ┌─────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│ Logging  │→│GZip/CORS│  │
    │  └──────────────┘ └──────────┘ └──────────┘ └─────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  ┌──────────────┐ ┌───────────────┐ ┌─────────────────┐  │
    │  │ /api/posts   │ │ /api/auth     │ │ /api/categories │  │
    │  │ .../comments │ │ /uploads/...  │ │ /health         │  │
    │  └──────────────┘ └───────────────┘ └─────────────────┘  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ Forbidden→403 │ 404    │  │
    │  │ RateLimit→429  │ Storage/DB→500 │ Unexpected→500   │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Every failure leaves the API as
    {"success": false, "error": <code>, "message": ..., "details"?: ..., "requestId": ...}
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quillboard import __version__
from quillboard.config import settings
from quillboard.database import dispose_engine
from quillboard.exceptions import (
    DatabaseError,
    FileStorageError,
    ForbiddenError,
    NotFoundError,
    QuillboardError,
    RateLimitExceededError,
    UnauthenticatedError,
    ValidationError,
)
from quillboard.middleware.logging import RequestLoggingMiddleware
from quillboard.middleware.rate_limit import RateLimitMiddleware
from quillboard.middleware.request_id import RequestIDMiddleware, request_id_var
from quillboard.routes import auth, categories, comments, health, posts, uploads

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "An internal error occurred. Please try again later."

_HTTP_ERROR_CODES = {
    400: "validation_error",
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
    429: "rate_limit_exceeded",
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] quillboard.access: GET /api/posts 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, storage directory.
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Quillboard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; tokens still work, they are just signed with a weak key
        logger.warning("Configuration warning: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Quillboard Backend shutting down...")
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
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the failure envelope, tagged with the current request ID."""
    content: Dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "requestId": request_id_var.get("") or None,
    }
    if details:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the failure envelope.

        ValidationError          → 400 (with details)
        RequestValidationError   → 400 (malformed body or parameters)
        UnauthenticatedError     → 401 (WWW-Authenticate: Bearer)
        ForbiddenError           → 403
        NotFoundError            → 404
        RateLimitExceededError   → 429 (Retry-After)
        FileStorageError         → 500 (generic message)
        DatabaseError            → 500 (generic message)
        QuillboardError (base)   → its own status_code
        HTTPException            → its status code (unknown routes, 405...)
        Exception (fallback)     → 500

    Internal details (paths, SQL, stack traces) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, exc.error_code, exc.message, details=exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), errors)
        return error_response(
            400,
            "validation_error",
            "The request body or parameters are malformed",
            details={"errors": errors},
        )

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return error_response(
            401, exc.error_code, exc.message, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.info("[%s] Forbidden: %s", request_id_var.get(""), exc.message)
        return error_response(403, exc.error_code, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, exc.error_code, exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return error_response(
            429,
            exc.error_code,
            exc.message,
            details=exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return error_response(500, exc.error_code, GENERIC_SERVER_MESSAGE)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return error_response(500, exc.error_code, GENERIC_SERVER_MESSAGE)

    @app.exception_handler(QuillboardError)
    async def handle_quillboard_error(request: Request, exc: QuillboardError):
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
            return error_response(exc.status_code, exc.error_code, GENERIC_SERVER_MESSAGE)
        return error_response(exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        code = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(exc.status_code, code, message, headers=exc.headers)

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
        title="Quillboard API",
        description=(
            "Blog backend: posts with categories, search and pagination, "
            "image uploads, comments, and token authentication."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(categories.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()
