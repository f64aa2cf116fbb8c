"""
Unit tests for the request logging middleware.

This test suite covers:
- Request/response processing
- Duration reporting to monitoring
- Error propagation
- Slow request detection
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from starlette.responses import Response

from thinky.server.middleware.request_logging import RequestLoggingMiddleware


def _request(method: str = "GET", path: str = "/api/subjects"):
    request = AsyncMock(spec=Request)
    request.method = method
    request.url.path = path
    request.state = MagicMock()
    return request


@pytest.mark.asyncio
class TestRequestLoggingMiddleware:
    async def test_processes_successful_request(self):
        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = RequestLoggingMiddleware(app=AsyncMock())
        with patch("thinky.server.middleware.request_logging.log_api_request") as mock_log:
            response = await middleware.dispatch(_request(), call_next)

        assert response.status_code == 200
        assert "X-Process-Time" in response.headers
        kwargs = mock_log.call_args[1]
        assert kwargs["method"] == "GET"
        assert kwargs["path"] == "/api/subjects"
        assert kwargs["status_code"] == 200
        assert kwargs["duration_ms"] >= 0

    async def test_reraises_and_reports_500(self):
        async def call_next(request):
            raise RuntimeError("boom")

        middleware = RequestLoggingMiddleware(app=AsyncMock())
        with patch("thinky.server.middleware.request_logging.log_api_request") as mock_log:
            with pytest.raises(RuntimeError):
                await middleware.dispatch(_request("POST"), call_next)

        assert mock_log.call_args[1]["status_code"] == 500

    async def test_warns_on_slow_request(self):
        async def call_next(request):
            return Response(status_code=204)

        middleware = RequestLoggingMiddleware(app=AsyncMock())
        with (
            patch("thinky.server.middleware.request_logging.log_api_request"),
            patch("thinky.server.middleware.request_logging.SLOW_REQUEST_MS", -1),
            patch("thinky.server.middleware.request_logging.logger") as mock_logger,
        ):
            await middleware.dispatch(_request(), call_next)

        mock_logger.warning.assert_called_once()
