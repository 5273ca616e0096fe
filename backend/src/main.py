"""Health Exam Extractor - Main FastAPI Application

Extracts structured data from photographed or scanned medical exams and
serves time-limited public share links for the extracted records.

This module creates and configures the FastAPI application, including:
- API routers (extraction, share links, observability)
- Middleware (request ID correlation, CORS)
- Exception handlers mapping domain faults to stable error kinds
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from config import Settings, get_settings
from domain.ai.ports import (
    LLMError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from domain.errors import (
    ExamExtractorError,
    InvalidDocument,
    InvalidTTL,
    MalformedResponse,
    NoResponseContent,
    UnsupportedInput,
)
from extraction.router import router as extraction_router
from extraction.service import ExtractionService
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router
from shares.router import router as shares_router
from shares.store import ShareStore

logger = logging.getLogger(__name__)

DOMAIN_ERROR_STATUS = {
    UnsupportedInput: status.HTTP_400_BAD_REQUEST,
    InvalidDocument: status.HTTP_400_BAD_REQUEST,
    InvalidTTL: status.HTTP_400_BAD_REQUEST,
    NoResponseContent: status.HTTP_500_INTERNAL_SERVER_ERROR,
    MalformedResponse: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the share store on startup and close it on shutdown.

    A store passed to create_app() is left alone; its owner closes it.
    """
    settings: Settings = app.state.settings
    owns_store = getattr(app.state, "share_store", None) is None

    if owns_store:
        store = ShareStore.from_url(
            settings.DATABASE_URL,
            max_ttl_seconds=settings.SHARE_MAX_TTL_SECONDS,
        )
        store.create_schema()
        app.state.share_store = store

    logger.info("Health Exam Extractor starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    removed = app.state.share_store.sweep()
    logger.info(f"Startup sweep removed {removed} expired shares")
    # Seeds the shares_stored gauge
    app.state.share_store.count()

    yield

    logger.info("Health Exam Extractor shutting down...")
    if owns_store:
        app.state.share_store.dispose()
        app.state.share_store = None


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def domain_exception_handler(request: Request, exc: ExamExtractorError) -> JSONResponse:
    """Report a domain fault with its stable kind."""
    status_code = DOMAIN_ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{exc.kind} on {request.method} {request.url.path}: {exc.message}",
        extra={"error_kind": exc.kind},
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def llm_exception_handler(request: Request, exc: LLMError) -> JSONResponse:
    """Report extraction engine faults. Provider details stay in the logs."""
    if isinstance(exc, LLMTimeoutError):
        status_code, kind, message = (
            status.HTTP_504_GATEWAY_TIMEOUT,
            "extraction_timeout",
            "The extraction engine did not answer in time. Please try again.",
        )
    elif isinstance(exc, LLMRateLimitError):
        status_code, kind, message = (
            status.HTTP_429_TOO_MANY_REQUESTS,
            "extraction_rate_limited",
            "The extraction engine is busy. Please try again later.",
        )
    else:
        status_code, kind, message = (
            status.HTTP_502_BAD_GATEWAY,
            "extraction_unavailable",
            "The extraction engine is unavailable.",
        )

    logger.error(
        f"{kind} on {request.method} {request.url.path}: {exc}",
        extra={"error_kind": kind},
    )
    return JSONResponse(status_code=status_code, content={"error": kind, "message": message})


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level details."""
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"error_kind": "validation_error"},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": [
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in exc.errors()
            ],
        },
    )


async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Log the full database error but return a generic message."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Catch-all so one request's failure never takes the process down."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    share_store: Optional[ShareStore] = None,
    extraction_service: Optional[ExtractionService] = None,
) -> FastAPI:
    """Build a configured application.

    Args:
        settings: Settings to use (defaults to environment settings)
        share_store: Pre-built store; when omitted one is opened from
            DATABASE_URL during startup
        extraction_service: Pre-built service; when omitted one is built
            from ANTHROPIC_API_KEY on first extraction
    """
    settings = settings or get_settings()

    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    is_production = settings.ENVIRONMENT == "production"
    app = FastAPI(
        title="Health Exam Extractor API",
        description="Structured extraction and time-limited sharing of medical exam results",
        version="0.1.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.share_store = share_store
    app.state.extraction_service = extraction_service

    # Request ID Middleware (must be first for proper correlation)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_exception_handler(ExamExtractorError, domain_exception_handler)
    app.add_exception_handler(LLMError, llm_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(observability_router)
    app.include_router(extraction_router, prefix="/api")
    app.include_router(shares_router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {
            "name": "Health Exam Extractor API",
            "version": "0.1.0",
            "status": "running",
            "docs": None if is_production else "/docs",
        }

    return app


app = create_app()


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=get_settings().ENVIRONMENT == "development",
        log_level=get_settings().LOG_LEVEL.lower(),
    )
