from __future__ import annotations

import os
import tempfile
from typing import Iterable

import httpx
import pytest

# The settings object is built on first import, so the test environment has
# to be in place before anything from ``thinky`` is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("AVATAR_UPLOAD_DIR", tempfile.mkdtemp(prefix="thinky-avatars-"))
os.environ.setdefault("SUPABASE_URL", "")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("API_RATE_LIMIT", "10000")
os.environ.setdefault("AUTH_RATE_LIMIT", "10000")
os.environ.setdefault("LOGFIRE_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "development")


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Start every test with empty rate limit windows and login lockouts."""
    from thinky.server.services.rate_limiter import reset_rate_limits

    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
