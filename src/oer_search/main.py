"""
OER Search Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures exception handling, and provides a test-friendly application
factory.

Startup fills the language cache (a failure is logged, not fatal) and,
when configured, starts its periodic refresh. Shutdown stops that task and
closes the upstream HTTP clients.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import FastAPI

from .api import (
    health_routes,
    language_routes,
    material_routes,
    search_routes,
)
from .api.dependencies import get_search_service
from .config import settings
from .core.errors import (
    LicenseFormatError,
    MaterialNotFoundError,
    MissingParameterError,
    invalid_record_handler,
    material_not_found_handler,
    missing_parameter_handler,
    unhandled_exception_handler,
    upstream_error_handler,
)
from .core.logging import configure_logging, log_requests
from .index.client import IndexClientError
from .providers.images import ImageSearchError

logger = logging.getLogger("oer.app")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting oer-search")
    service = get_search_service()

    try:
        await service.refresh_languages()
    except IndexClientError:
        logger.exception("Could not load the language cache at startup")

    refresher = None
    if settings.language_refresh_interval > 0:
        refresher = asyncio.create_task(
            service.languages.run_periodic(service.index, settings.language_refresh_interval)
        )

    yield

    logger.info("Shutting down oer-search")
    if refresher is not None:
        refresher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresher
    await service.index.aclose()
    await service.images.aclose()


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    configure_logging(settings.log_level, settings.log_file)

    app = FastAPI(
        title="oer-search",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.middleware("http")(log_requests)

    # --------------------------------------------------------------
    # Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(MissingParameterError, missing_parameter_handler)
    app.add_exception_handler(MaterialNotFoundError, material_not_found_handler)
    app.add_exception_handler(LicenseFormatError, invalid_record_handler)
    app.add_exception_handler(IndexClientError, upstream_error_handler)
    app.add_exception_handler(ImageSearchError, upstream_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(search_routes.router)
    app.include_router(material_routes.router)
    app.include_router(language_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
