"""
Subject and school I/O models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..base import BaseSchema, UtcDateTime


class SubjectWrite(BaseModel):
    """Body for creating or renaming a subject."""

    name: Optional[str] = None
    description: Optional[str] = None
    school: Optional[str] = None


class SubjectRead(BaseSchema):
    id: str
    user_id: str
    name: str
    description: str = ""
    school: str
    created_at: UtcDateTime


class SchoolRead(BaseSchema):
    id: str
    name: str
