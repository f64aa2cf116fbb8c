"""
Query-string pagination.

Limits and offsets arrive as loosely formatted strings; anything unreadable
falls back to the defaults instead of failing the request.
"""

from __future__ import annotations

from typing import Optional, Tuple

from thinky.server.core import constant


def _to_int(value: Optional[str]) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def page_window(
    limit: Optional[str],
    offset: Optional[str],
    default_limit: int = constant.DEFAULT_PAGE_LIMIT,
    max_limit: int = constant.MAX_PAGE_LIMIT,
) -> Tuple[int, int]:
    """Return ``(limit, offset)`` with the limit capped and the offset non-negative."""
    size = _to_int(limit)
    if size <= 0:
        size = default_limit
    return min(size, max_limit), max(_to_int(offset), 0)


def message_limit(
    limit: Optional[str],
    default_limit: int = constant.DEFAULT_MESSAGE_LIMIT,
    max_limit: int = constant.MAX_MESSAGE_LIMIT,
) -> int:
    """Number of chat messages to return; zero or unreadable means the default."""
    size = _to_int(limit)
    if size <= 0:
        size = default_limit
    return min(size, max_limit)
