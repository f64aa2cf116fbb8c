"""
Middleware for the Thinky server.
"""

from .api_guard import ApiGuardMiddleware
from .request_logging import RequestLoggingMiddleware

__all__ = ["ApiGuardMiddleware", "RequestLoggingMiddleware"]
