"""Core models and schemas shared by the API layer."""

from __future__ import annotations

from .base import BaseSchema, UtcDateTime, to_iso

__all__ = [
    "BaseSchema",
    "UtcDateTime",
    "to_iso",
]
