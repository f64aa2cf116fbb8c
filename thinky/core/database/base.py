"""
Base database models and utilities.

This module provides the foundational database components used across
all entities in the centralized database layer using SQLModel.

Timestamp fields are plain ``datetime`` annotations. SQLModel maps them to
its ``UTCDateTime`` column type, which only accepts timezone-aware values and
always loads them back as aware UTC, SQLite included.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a datetime to aware UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    """Generate a primary key value (UUID4 string)."""
    return str(uuid.uuid4())
