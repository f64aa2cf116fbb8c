"""
Request rate limiting and login lockout.

Both guards keep their state in process memory, so limits apply per server
process. ``reset_rate_limits`` clears everything (used by tests).
"""

from __future__ import annotations

import math
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional

from fastapi import HTTPException, Request

from thinky.core.logging_config import get_logger
from thinky.server.core.config import settings

logger = get_logger(__name__)

API_LIMIT_MESSAGE = "Too many requests, please try again later."
AUTH_LIMIT_MESSAGE = "Too many authentication attempts, please try again later."


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per key within any ``window_seconds`` span."""

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def _cleanup(self, key: str, now: float) -> Deque[float]:
        hits = self._hits[key]
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits

    def hit(self, key: str) -> bool:
        """Record a request for ``key``; False when it is over the limit."""
        now = self._clock()
        hits = self._cleanup(key, now)
        if len(hits) >= self.max_requests:
            logger.warning(f"Rate limit hit for {key}")
            return False
        hits.append(now)
        return True

    def reset(self) -> None:
        self._hits.clear()


@dataclass
class _AttemptRecord:
    count: int
    first: float
    lock_until: Optional[float] = None


class LoginAttemptTracker:
    """Count failed logins per identifier and lock it after too many.

    A record older than the lock period starts counting again from zero.
    """

    def __init__(self, max_attempts: int, lock_seconds: float, clock: Callable[[], float] = time.time) -> None:
        self.max_attempts = max_attempts
        self.lock_seconds = lock_seconds
        self._clock = clock
        self._records: Dict[str, _AttemptRecord] = {}

    def retry_after(self, identifier: str) -> float:
        """Seconds until ``identifier`` may try again (0 when not locked)."""
        record = self._records.get(identifier)
        if record is None or record.lock_until is None:
            return 0
        return max(record.lock_until - self._clock(), 0)

    def retry_after_minutes(self, identifier: str) -> int:
        return math.ceil(math.ceil(self.retry_after(identifier)) / 60)

    def record_failure(self, identifier: str) -> None:
        now = self._clock()
        record = self._records.get(identifier)
        if record is None or now - record.first > self.lock_seconds:
            record = _AttemptRecord(count=0, first=now)
        record.count += 1
        if record.count >= self.max_attempts:
            record.lock_until = now + self.lock_seconds
            logger.warning(f"Login locked for {identifier} after {record.count} failed attempts")
        self._records[identifier] = record

    def clear(self, identifier: str) -> None:
        self._records.pop(identifier, None)

    def reset(self) -> None:
        self._records.clear()


_limits = settings.rate_limit
api_limiter = SlidingWindowRateLimiter(_limits.api_limit, _limits.window_seconds)
auth_limiter = SlidingWindowRateLimiter(_limits.auth_limit, _limits.window_seconds)
login_attempts = LoginAttemptTracker(_limits.max_login_attempts, _limits.lock_seconds)


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_auth_rate_limit(request: Request) -> None:
    """Dependency for the authentication endpoints."""
    if not settings.rate_limit_enabled:
        return
    if not auth_limiter.hit(client_key(request)):
        raise HTTPException(status_code=429, detail=AUTH_LIMIT_MESSAGE)


def reset_rate_limits() -> None:
    api_limiter.reset()
    auth_limiter.reset()
    login_attempts.reset()
