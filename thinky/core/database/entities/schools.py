"""
Verified school entity.

Schools are curated by administrators and offered as choices when a student
creates a subject.
"""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class VerifiedSchool(Base, table=True):
    """A school name students may attach to their subjects.

    Table: verified_schools
    """

    __tablename__ = "verified_schools"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    name: str = Field(max_length=256, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now)
