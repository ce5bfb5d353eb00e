"""
Scrol Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       the module-level `app` is what uvicorn serves (uvicorn scrol.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌──────────┐                  │
    │  │  CORS    │→│ Req ID   │→│ Logging  │                  │
    │  └──────────┘ └──────────┘ └──────────┘                  │
    │                                                          │
    │  Routes:                                                 │
    │  public  GET /find /viewprofile /getpicture              │
    │  profile POST / /update /listcvs                         │
    │  friends POST /addfriend /acceptfriend /block /myfriends │
    │  photos  POST /getpicture /updatepicture                 │
    │  health  GET /health                                     │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ScrolError → its status │ validation → 400              │
    │  unknown route/method → 404 │ anything else → 500        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, blob root check
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scrol import __version__
from scrol.config import settings
from scrol.database import dispose_engine
from scrol.exceptions import ScrolError
from scrol.middleware.cors import CORSHeadersMiddleware
from scrol.middleware.logging import RequestLoggingMiddleware
from scrol.middleware.request_id import RequestIDMiddleware, request_id_var
from scrol.routes import friends, health, photos, profile, public
from scrol.services.blob_store import blob_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Third-party loggers that log every query or connection are raised to WARNING.
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
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Scrol Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and development setups still work
        logger.error("Configuration error: %s", str(e))

    if not await blob_store.health_check():
        logger.error("Blob store root is not readable and writable; photo routes will fail.")

    logger.info(
        "Capabilities: public_profiles=%s company_field=%s photo_upload=%s require_accept=%s",
        settings.feature_public_profiles,
        settings.feature_company_field,
        settings.feature_photo_upload,
        settings.friend_requests_require_accept,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Scrol Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    """
    Build the error envelope {"error", "code", "request_id"}.

    The CORS map is added here as well: the 500 fallback handler runs
    outside the middleware chain.
    """
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "code": code, "request_id": request_id_var.get("")},
        headers=dict(settings.cors_headers),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to the one error envelope.

    Handler hierarchy:
        ScrolError (any subclass)   → exc.status_code, exc.message
        RequestValidationError      → 400
        HTTPException 404 / 405     → 404 "Not found"
        HTTPException (other)       → its status, its detail
        Exception (fallback)        → 500 "Internal Server Error"

    Context dicts and stack traces are logged, never returned.
    """

    @app.exception_handler(ScrolError)
    async def handle_scrol_error(request: Request, exc: ScrolError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(exc.status_code, exc.message, exc.code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %s", rid, exc.errors())
        return error_response(400, "Invalid request", "validation_error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return error_response(404, "Not found", "not_found")
        return error_response(exc.status_code, str(exc.detail), "http_error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(500, "Internal Server Error", "internal_error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into a FastAPI app."""
    app = FastAPI(
        title="Scrol API",
        description=(
            "Candidate profiles, friend graph, CV listing and profile photos. "
            "Protected routes take an identity token in the request body."
        ),
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → RequestID → Logging → route
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(CORSHeadersMiddleware, headers=settings.cors_headers)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(public.router)
    app.include_router(profile.router)
    app.include_router(friends.router)
    app.include_router(photos.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
