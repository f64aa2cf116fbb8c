"""
Exception handlers for the FastAPI application.

Every error leaves the API as a JSON object with an ``error`` key:

- ``HTTPException`` details become ``{"error": detail}``; a dict detail is
  sent as-is so handlers can attach extra fields.
- Request validation errors answer 400 with the pydantic error list.
- Anything unhandled is logged with an error id and answers 500.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from thinky.core.logging_config import get_logger

logger = get_logger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render an ``HTTPException`` in the ``{"error": ...}`` shape."""
    if isinstance(exc.detail, dict):
        content = dict(exc.detail)
    elif exc.status_code == 404 and exc.detail == "Not Found":
        content = {"error": "Not found"}
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Invalid request to {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
