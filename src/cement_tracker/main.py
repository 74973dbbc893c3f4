"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import customers, deliveries, health, tracking
from .config import settings
from .errors import (
    GeocodingError,
    InvalidTransition,
    MissingDestination,
    NotFound,
    TrackingError,
    Unauthenticated,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: AddressNotFound is both a GeocodingError and a NotFound.
ERROR_STATUS_CODES: tuple[tuple[type[TrackingError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidTransition, status.HTTP_409_CONFLICT),
    (MissingDestination, 422),
    (GeocodingError, status.HTTP_502_BAD_GATEWAY),
)


def status_code_for(exc: TrackingError) -> int:
    for error_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def tracking_error_handler(request: Request, exc: TrackingError) -> JSONResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc}")
    else:
        logger.info(f"{exc.kind} on {request.url.path}: {exc}")
    content = {"detail": str(exc), "error": exc.kind}
    if isinstance(exc, ValidationError) and exc.fields:
        content["fields"] = exc.fields
    return JSONResponse(status_code=code, content=content)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error.", "error": "internal_error"},
    )


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, root_path="")
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_exception_handler(TrackingError, tracking_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(customers.router, prefix=settings.api_prefix)
    app.include_router(deliveries.router, prefix=settings.api_prefix)
    app.include_router(tracking.router, prefix=settings.api_prefix)
    return app


app = create_app()
