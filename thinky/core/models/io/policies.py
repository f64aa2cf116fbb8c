"""
Community policy I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..base import BaseSchema, UtcDateTime


class PolicyWrite(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


class PolicyRead(BaseSchema):
    id: str
    title: str
    description: str = ""
    category: str
    created_at: UtcDateTime
    updated_at: Optional[UtcDateTime] = None
