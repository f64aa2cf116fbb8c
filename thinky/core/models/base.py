"""
Base schema definitions.

Timestamps are held as aware UTC datetimes; on the wire they are ISO-8601 strings
with a ``Z`` suffix so browsers parse them as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Render a stored timestamp as an ISO-8601 UTC string."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


UtcDateTime = Annotated[datetime, PlainSerializer(to_iso, return_type=str)]


class BaseSchema(BaseModel):
    """Base for response models read straight from ORM entities."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
