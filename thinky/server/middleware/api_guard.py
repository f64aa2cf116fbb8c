"""
API guard middleware.

Applies to ``/api/*`` only:

- answers 500 while critical configuration is missing (``/api/_status``
  stays reachable so operators can see what is wrong),
- enforces the per-client API rate limit,
- marks every response ``Cache-Control: no-store``.
"""

from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from thinky.core.logging_config import get_logger
from thinky.server.core import constant
from thinky.server.core.config import settings
from thinky.server.services.rate_limiter import API_LIMIT_MESSAGE, api_limiter, client_key

logger = get_logger(__name__)

STATUS_PATH = f"{constant.API_PREFIX}/_status"


class ApiGuardMiddleware(BaseHTTPMiddleware):
    """Readiness, rate limiting and cache headers for the JSON API."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not (path == constant.API_PREFIX or path.startswith(f"{constant.API_PREFIX}/")):
            return await call_next(request)

        response = await self._guard(request, path)
        if response is None:
            response = await call_next(request)
        response.headers["Cache-Control"] = "no-store"
        return response

    async def _guard(self, request: Request, path: str):
        if path != STATUS_PATH:
            missing = settings.missing_critical
            if missing:
                logger.error(f"Rejecting {request.method} {path}: missing configuration {missing}")
                return JSONResponse(status_code=500, content={"error": "Server misconfigured", "missing": missing})

        if settings.rate_limit_enabled and not api_limiter.hit(client_key(request)):
            return JSONResponse(status_code=429, content={"error": API_LIMIT_MESSAGE})
        return None
