"""
textdigest API - Main FastAPI Application

Thin HTTP boundary over SummarizationService: routes requests in and maps
error kinds to HTTP responses on the way out.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import AppSettings, configure_logging, get_settings
from ..errors import ErrorKind, SummarizationError
from ..models import field_errors
from ..summarization import SummarizationService, create_summarization_service
from .routes import health_router, router

logger = logging.getLogger(__name__)

# ErrorKind -> (status, title, detail). Provider bodies are never forwarded.
ERROR_RESPONSES = {
    ErrorKind.PROVIDER: (
        502,
        "External Service Error",
        "An error occurred while processing your request with the AI service.",
    ),
    ErrorKind.TIMEOUT: (
        504,
        "Gateway Timeout",
        "The request took too long to process. Please try again.",
    ),
    ErrorKind.MALFORMED_REPLY: (
        500,
        "Internal Server Error",
        "An unexpected error occurred while processing your request.",
    ),
}
INTERNAL_ERROR = ERROR_RESPONSES[ErrorKind.MALFORMED_REPLY]


def _problem(status: int, title: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"title": title, "detail": detail, "status": status},
    )


def _validation_problem(errors: dict) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "title": "One or more validation errors occurred.",
            "status": 400,
            "errors": errors,
        },
    )


def create_app(
    settings: Optional[AppSettings] = None,
    service: Optional[SummarizationService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings, uses cached settings if not provided
        service: Pre-built service; when omitted one is created at startup
            and closed at shutdown
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging(settings)
        logger.info(
            "Starting textdigest API",
            extra={"environment": settings.environment, "model": settings.completion.model},
        )

        owned = service is None
        app.state.summarization = (
            create_summarization_service(settings) if owned else service
        )

        yield

        logger.info("Shutting down textdigest API")
        if owned:
            await app.state.summarization.aclose()

    app = FastAPI(
        title="textdigest",
        description="Summaries and bullet points from a chat-completion provider",
        version=settings.version,
        lifespan=lifespan,
    )

    app.state.settings = settings

    app.include_router(router, prefix="/api/v1", tags=["text"])
    app.include_router(health_router, tags=["health"])

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _validation_problem(field_errors(exc.errors()))

    @app.exception_handler(SummarizationError)
    async def summarization_error_handler(request: Request, exc: SummarizationError):
        if exc.kind is ErrorKind.VALIDATION:
            return _validation_problem(exc.errors)

        status, title, detail = ERROR_RESPONSES.get(exc.kind, INTERNAL_ERROR)
        logger.error(
            f"Text summarization failed: {exc}",
            extra={"path": request.url.path, "error_kind": exc.kind.value},
        )
        return _problem(status, title, detail)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return _problem(*INTERNAL_ERROR)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "textdigest.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
