"""
Global Error Handling

This module defines the domain exceptions raised by the search core and the
application-wide exception handlers that turn them into HTTP responses.

Response shapes
---------------
- missing parameter: 400 `{"message": ..., "query": {...}}`
- unknown material: 404 `{"error": "not_found", ...}`
- malformed record: 400 `{"error": "invalid_record", ...}`
- index engine, image provider or anything else: 500 with a fixed body;
  the cause is only logged
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("oer.errors")


# ---------------------------------------------------------------------
# Domain Exceptions
# ---------------------------------------------------------------------

class MissingParameterError(ValueError):
    """Raised when a required search parameter is absent."""

    def __init__(self, message: str, query: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.query = query or {}


class MaterialNotFoundError(LookupError):
    """Raised when a material id does not exist in the index."""

    def __init__(self, material_id: int) -> None:
        super().__init__(f"material {material_id} not found")
        self.material_id = material_id


class LicenseFormatError(ValueError):
    """Raised when a license URL does not carry a /licenses/<code>/ segment."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

def _internal_error() -> JSONResponse:
    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }
    return JSONResponse(status_code=500, content=payload)


async def missing_parameter_handler(
    request: Request,
    exc: MissingParameterError,
) -> JSONResponse:
    """
    Return a 400 that echoes the query the client sent.
    """
    return JSONResponse(
        status_code=400,
        content={"message": exc.message, "query": exc.query},
    )


async def material_not_found_handler(
    request: Request,
    exc: MaterialNotFoundError,
) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": "not_found", "detail": str(exc)},
    )


async def invalid_record_handler(
    request: Request,
    exc: LicenseFormatError,
) -> JSONResponse:
    logger.warning(
        "Rejected record on %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_record", "detail": str(exc)},
    )


async def upstream_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Convert index-engine and image-provider failures into a generic 500.

    The upstream error is logged with its traceback but nothing of it is
    returned to the caller.
    """
    logger.error(
        "Upstream failure during request %s %s (%s)",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    return _internal_error()


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Last-resort 500 for exceptions no other handler claims."""
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _internal_error()
