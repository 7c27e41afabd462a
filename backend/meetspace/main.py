"""
MeetSpace Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires lifespan, middleware, exception handlers and routers
       and returns the app; `app` at module level is what uvicorn serves
       (uvicorn meetspace.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Request ID → Logging → CORS            │
    │                                                      │
    │  Routes:                                             │
    │    /api/v1/users/*      register, login, profile     │
    │    /api/v1/meetings/*   meeting CRUD (bearer)        │
    │    /health                                           │
    │                                                      │
    │  Exception Handlers:                                 │
    │    MeetSpaceError      → its status_code             │
    │    RequestValidation   → 400                         │
    │    Exception           → 500                         │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (logged, never fatal)
    Shutdown: log only; the Firebase handle lives for the process
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meetspace import __version__
from meetspace.config import settings
from meetspace.exceptions import MeetSpaceError
from meetspace.middleware.logging import RequestLoggingMiddleware
from meetspace.middleware.request_id import RequestIDMiddleware, request_id_var
from meetspace.routes import health, meetings, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-05T09:00:00 [INFO] meetspace.access: GET /api/v1/meetings 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Access lines come from meetspace.access instead
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("MeetSpace Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: health checks and the unaffected routes keep working
        logger.error("Configuration error: %s", str(e))

    logger.info("Document store: %s", settings.document_store)
    logger.info("Meeting ownership enforced: %s", settings.enforce_meeting_ownership)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("MeetSpace Backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every error as {"error", "message", "request_id"} (+ "details" on 400).

    Handler hierarchy:
        MeetSpaceError          → exc.status_code, exc.error_code
        RequestValidationError  → 400 invalid_argument, with field details
        Exception (fallback)    → 500, no internals in the body
    """

    @app.exception_handler(MeetSpaceError)
    async def handle_meetspace_error(request: Request, exc: MeetSpaceError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.error_code, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, exc.error_code, exc.message)

        details = exc.context if exc.status_code == 400 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", rid, errors)
        message = errors[0]["message"] if errors else "Invalid request"
        if errors and errors[0]["field"]:
            message = f"{errors[0]['field']}: {message}"
        return JSONResponse(
            status_code=400,
            content=_error_body("invalid_argument", message, {"errors": errors}),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="MeetSpace API",
        description=(
            "User accounts and meeting scheduling backed by Firebase Authentication "
            "and Cloud Firestore."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition: Request ID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(meetings.router)
    app.include_router(health.router)

    return app


app = create_app()
