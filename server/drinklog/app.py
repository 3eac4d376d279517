"""
FastAPI application entry point for the drink log relay.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from drinklog.config import Settings, get_settings
from drinklog.dependencies import build_document_store
from drinklog.errors import (
    AuthError,
    DrinkLogError,
    NotFoundError,
    RateLimitError,
    ValidationError,
    error_envelope,
)
from drinklog.middleware import (
    BodySizeLimitMiddleware,
    SecurityHeadersMiddleware,
    UnexpectedErrorMiddleware,
)
from drinklog.rate_limiter import FixedWindowRateLimiter
from drinklog.routes import available_endpoints, health_router, router
from drinklog.storage import DocumentStore

logger = logging.getLogger(__name__)


def _error_message(exc: DrinkLogError) -> str:
    if isinstance(exc, (ValidationError, RateLimitError)):
        return exc.message
    if isinstance(exc, AuthError):
        return "GitHub authentication failed, check the token permissions"
    if isinstance(exc, NotFoundError):
        return "GitHub repository or branch does not exist"
    return exc.operation or "Remote store request failed"


def _install_exception_handlers(app: FastAPI, settings: Settings) -> None:
    endpoints = available_endpoints(settings.api_prefix)

    @app.exception_handler(DrinkLogError)
    async def handle_drinklog_error(request: Request, exc: DrinkLogError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(
                _error_message(exc), exc.message, category=exc.category
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_envelope(
                "Invalid request body", "; ".join(errors), category="validation"
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content=error_envelope(
                    "API endpoint does not exist",
                    f"{request.method} {request.url.path}",
                    availableEndpoints=endpoints,
                ),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail), exc.detail),
        )


def create_app(
    settings: Optional[Settings] = None, store: Optional[DocumentStore] = None
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Drink Log Relay (FastAPI)", version="0.1.0")
    app.state.settings = settings
    app.state.document_store = store or build_document_store(settings)
    app.state.rate_limiter = FixedWindowRateLimiter(
        settings.rate_limit_max_requests, settings.rate_limit_window_seconds
    )

    # Added innermost first; CORS wraps everything so error responses carry it too.
    app.add_middleware(
        UnexpectedErrorMiddleware, expose_detail=not settings.is_production
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(
        SecurityHeadersMiddleware, enforce_hsts=settings.is_production
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(health_router)
    app.include_router(router, prefix=settings.api_prefix)
    _install_exception_handlers(app, settings)

    logger.info(
        "Drink log relay configured for %s (%s on %s) using %s",
        settings.repository,
        settings.data_path,
        settings.github_branch,
        app.state.document_store.__class__.__name__,
    )
    return app
