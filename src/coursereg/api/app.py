"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursereg.api.dependencies import close_services, init_services
from coursereg.api.models import APIResponse
from coursereg.api.routes import (
    billing_profiles,
    courses,
    discounts,
    inscriptions,
    invoices,
    persons,
    reports,
    vouchers,
)
from coursereg.config import Settings
from coursereg.errors import (
    ConflictError,
    CourseRegError,
    InternalError,
    NotFoundError,
    PermissionDeniedError,
    UnknownError,
    ValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[CourseRegError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ValidationError: 422,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = app.state.settings if hasattr(app.state, "settings") else Settings()
    init_services(settings)
    logger.info("coursereg API started (db=%s)", settings.db_path)
    yield
    close_services()


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy onto HTTP status codes."""

    @app.exception_handler(CourseRegError)
    async def classified_error_handler(_request: Request, exc: CourseRegError) -> JSONResponse:
        for error_type, status_code in _STATUS_CODES.items():
            if isinstance(exc, error_type):
                return _error_response(status_code, str(exc))
        if isinstance(exc, InternalError):
            logger.error("Internal error: %s", exc)
        elif isinstance(exc, UnknownError):
            logger.error("Unknown error: %s", exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="coursereg API",
        description="REST API for course enrollment and payment verification",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings if settings is not None else Settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(persons.router, prefix="/api/v1")
    app.include_router(billing_profiles.router, prefix="/api/v1")
    app.include_router(vouchers.router, prefix="/api/v1")
    app.include_router(discounts.router, prefix="/api/v1")
    app.include_router(inscriptions.router, prefix="/api/v1")
    app.include_router(invoices.router, prefix="/api/v1")
    app.include_router(reports.router, prefix="/api/v1")

    return app
