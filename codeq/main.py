"""
CodeQ Backend - FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn codeq.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐ ┌───────────┐   │
    │  │ Rate Limit │→│  Req ID  │→│ Logging │→│ GZip/CORS │   │
    │  └────────────┘ └──────────┘ └─────────┘ └───────────┘   │
    │                                                          │
    │  Routers:                                                │
    │  /api/auth  /api/questions  /api/answers  /api/comments  │
    │  /api/votes /api/users      /health                      │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400  Auth→401  Permission→403  NotFound→404  │
    │  RateLimit→429   Database→500  anything else→500         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (warns, never exits)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from codeq import __version__
from codeq.config import settings
from codeq.database import dispose_engine
from codeq.exceptions import (
    AuthenticationError,
    CodeQError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
)
from codeq.middleware.logging import RequestLoggingMiddleware
from codeq.middleware.rate_limit import RateLimitMiddleware
from codeq.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from codeq.routes import answers, auth, comments, health, questions, users, votes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # codeq.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("CodeQ Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Still serve: local development runs on the defaults
        logger.warning("%s", e)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("CodeQ Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> Optional[str]:
    """
    The ContextVar is only set while RequestIDMiddleware is on the stack.
    The catch-all handler runs in ServerErrorMiddleware, outside it, so
    fall back to what the middleware left on the request scope.
    """
    return (
        request_id_var.get("")
        or getattr(request.state, "request_id", None)
        or request.headers.get(REQUEST_ID_HEADER)
    )


def _error_body(
    request: Request, error: str, message: str, details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return {
        "error": error,
        "message": message,
        "details": details or None,
        "request_id": _request_id(request),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exception types to HTTP status codes and the shared error body
    {error, message, details, request_id}.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        AuthenticationError                      → 401
        PermissionDeniedError                    → 403
        NotFoundError                            → 404
        RateLimitExceededError                   → 429
        DatabaseError                            → 500 (generic message)
        CodeQError (base) / Exception            → 500 (message echoed)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed bodies, bad UUIDs and out-of-range query params."""
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        message = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "validation_error", message, {"errors": errors}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body(request, "unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        return JSONResponse(
            status_code=403,
            content=_error_body(request, "permission_denied", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body(request, "not_found", exc.message, exc.context),
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=429,
            content=_error_body(request, "rate_limit_exceeded", exc.message, exc.context),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client; the context stays in the server log."""
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request, "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(CodeQError)
    async def handle_codeq_error(request: Request, exc: CodeQError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            exc,
            exc_info=True,
        )
        body = _error_body(request, "internal_server_error", str(exc) or "Server error")
        headers = {REQUEST_ID_HEADER: body["request_id"]} if body["request_id"] else None
        return JSONResponse(status_code=500, content=body, headers=headers)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Assemble middleware, exception handlers and routers.

    Each call builds an independent app (fresh rate-limit counters), which
    the test suite relies on.
    """
    app = FastAPI(
        title="CodeQ API",
        description=(
            "Community Q&A for programmers: questions, answers, comments, "
            "votes, reputation and expert verification."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS → route
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
    app.include_router(questions.router)
    app.include_router(answers.router)
    app.include_router(comments.router)
    app.include_router(votes.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# uvicorn codeq.main:app
app = create_app()
